from eni_lifecycle.config.settings import ReconcilerConfig, load_config

__all__: list[str] = ["ReconcilerConfig", "load_config"]
