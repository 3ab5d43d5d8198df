from eni_lifecycle.infrastructure.resilience.poller import PollOutcome, Poller, PollResult

__all__: list[str] = ["PollOutcome", "PollResult", "Poller"]
