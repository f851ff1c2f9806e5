from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List


@dataclass(frozen=True)
class ScriptSpec:
    url: str
    dest: str
    mode: int | None = None


@dataclass(frozen=True)
class BuildConfig:
    raw: Dict[str, Any]

    @property
    def image(self) -> str:
        image = str(self.raw.get("image") or "").strip()
        if not image:
            raise ValueError("build config: 'image' is required")
        return image

    @property
    def archive_name(self) -> str:
        return str(self.raw.get("archive_name") or "ACH-Zeek")

    @property
    def stage_root(self) -> str:
        return str(((self.raw.get("paths") or {}).get("stage_root")) or "stage")

    @property
    def stage_dir(self) -> Path:
        return Path(self.stage_root) / self.archive_name

    @property
    def output_dir(self) -> Path:
        return Path(((self.raw.get("paths") or {}).get("output_dir")) or ".")

    @property
    def images_subdir(self) -> str:
        return str(((self.raw.get("paths") or {}).get("images_subdir")) or "images")

    @property
    def registry(self) -> str:
        return str(((self.raw.get("registry") or {}).get("host")) or "docker.io")

    @property
    def skopeo_image(self) -> str:
        return str(((self.raw.get("registry") or {}).get("skopeo_image")) or "quay.io/containers/skopeo:latest")

    @property
    def fetch_timeout(self) -> float:
        return float(self.raw.get("fetch_timeout") or 60)

    @property
    def scripts(self) -> List[ScriptSpec]:
        out: List[ScriptSpec] = []
        for entry in self.raw.get("scripts") or []:
            if not isinstance(entry, dict) or not entry.get("url") or not entry.get("dest"):
                raise ValueError(f"build config: script entries need 'url' and 'dest': {entry!r}")
            mode = entry.get("mode")
            if isinstance(mode, str):
                # Quoted in YAML ("0755"); an unquoted 0755 already arrives as an int.
                mode = int(mode, 8)
            out.append(
                ScriptSpec(
                    url=str(entry["url"]),
                    dest=str(entry["dest"]),
                    mode=mode,
                )
            )
        return out


def load_build_config(path: str) -> BuildConfig:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("build config must be YAML")

    try:
        import yaml  # type: ignore
    except ImportError as e:
        raise RuntimeError("PyYAML is required to read build_config.yaml") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("build_config.yaml must contain a mapping/object")

    return BuildConfig(raw=raw)
