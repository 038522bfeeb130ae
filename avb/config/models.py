from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


def _videos_dir() -> Path:
    return Path.home() / "Videos"


class RenamerConfig(BaseModel):
    """External command that shortens destination file names.

    Called as ``command *args <path>`` only for names over either limit.
    """
    command: str
    args: List[str] = Field(default_factory=list)
    bytes_limit: int = Field(gt=0)
    chars_limit: int = Field(gt=0)


class AppConfig(BaseModel):
    save_dir: Path = Field(default_factory=lambda: _videos_dir() / "av1_encoded")
    tmp_dir: Path = Field(default_factory=lambda: _videos_dir() / "av1_tmp")
    min_crf: int = Field(default=15, ge=0, le=63)
    max_crf: int = Field(default=50, ge=0, le=63)
    max_encoded_percent: int = Field(default=70, gt=0, le=100)
    keep_original: bool = True
    move_failed_files: bool = False
    delete_almost_same_files: bool = False
    duration_tolerance: float = Field(default=0.01, ge=0.0, lt=1.0)
    renamer: Optional[RenamerConfig] = None
    log_path: Optional[str] = None
    debug: bool = False

    @field_validator("save_dir", "tmp_dir")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return Path(v).expanduser()

    @model_validator(mode="after")
    def validate_crf_range(self):
        if self.min_crf > self.max_crf:
            raise ValueError("min_crf must be <= max_crf")
        return self

    @property
    def encoding_dir(self) -> Path:
        """Hash-named in-flight encodes live here."""
        return self.tmp_dir / "encoding"

    @property
    def encoder_scratch_dir(self) -> Path:
        return self.tmp_dir / "ab_av1_tmp"

    @property
    def resolved_log_path(self) -> Path:
        if self.log_path:
            return Path(self.log_path).expanduser()
        return self.tmp_dir / "avb.log"
