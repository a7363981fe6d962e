"""
Signature domain models.
Represents enrolled handwriting samples and the data needed to enroll one.
"""

from typing import Optional, Dict, Any, List
from datetime import datetime
from pydantic import BaseModel, Field


class CaptureMetadata(BaseModel):
    """
    Device and capture information recorded with a sample.
    Informational only, never used in matching.
    """

    user_agent: Optional[str] = Field(None, description="Client device string")
    screen_resolution: Optional[str] = Field(None, description="e.g. 1920x1080")
    timezone: Optional[str] = Field(None, description="IANA timezone name")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Additional client keys")

    def to_device_info(self) -> Dict[str, Any]:
        """Flatten into the device_info JSON column."""
        info = dict(self.extra)
        info.update({
            "user_agent": self.user_agent,
            "screen_resolution": self.screen_resolution,
            "timezone": self.timezone,
        })
        return {k: v for k, v in info.items() if v is not None}


class SampleUpload(BaseModel):
    """A sample as received from the caller, before it is stored."""

    content: bytes = Field(..., repr=False)
    media_type: str = Field(..., description="Declared MIME type")
    file_name: str = Field("signature.png", description="Original file name")
    byte_size: Optional[int] = Field(None, ge=0, description="Declared size; defaults to len(content)")

    capture: CaptureMetadata = Field(default_factory=CaptureMetadata)
    quality_score: Optional[float] = Field(None, ge=0, le=1)
    features: Optional[Any] = Field(None, description="Opaque feature vector")
    width: Optional[int] = Field(None, ge=1)
    height: Optional[int] = Field(None, ge=1)

    @property
    def declared_size(self) -> int:
        return self.byte_size if self.byte_size is not None else len(self.content)


class SignatureSample(BaseModel):
    """One enrolled signature. Immutable once stored."""

    id: int = Field(..., description="Sample ID")
    student_id: int = Field(..., description="Owning identity")

    storage_path: str = Field(..., description="Object path inside the signatures bucket")
    file_name: str = Field(..., description="Original file name")
    file_size: int = Field(..., ge=0, description="Size in bytes")
    file_type: str = Field(..., description="MIME type")

    width: Optional[int] = None
    height: Optional[int] = None

    features: Optional[Any] = Field(None, description="Opaque feature vector")
    quality_score: Optional[float] = Field(None, ge=0, le=1)
    device_info: Dict[str, Any] = Field(default_factory=dict)

    created_at: Optional[datetime] = None

    @property
    def feature_vector(self) -> Optional[List[float]]:
        """
        Feature vector as a flat list, if one is stored.
        Accepts a bare list or a dict with an "embedding" key.
        """
        features = self.features
        if isinstance(features, dict):
            features = features.get("embedding")
        if isinstance(features, list) and features:
            return features
        return None

    class Config:
        frozen = True
