from eni_lifecycle.domain.attachment.models import Attachment, Instance

__all__: list[str] = ["Attachment", "Instance"]
