"""Image upload response."""

from foodies.schemas.common import CamelModel


class UploadResult(CamelModel):
    success: bool = True
    url: str
    file_name: str
