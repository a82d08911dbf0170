from __future__ import annotations

import json
import tomllib
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from adamctl.models import DeviceProfile, SequenceList, TriggerSequence, example_sequence

PROFILES_FILE = "profiles.toml"
SEQUENCES_FILE = "sequences.json"


def _toml_string(value: str) -> str:
    return json.dumps(value)


def _render_profiles_toml(profiles: list[DeviceProfile]) -> str:
    lines = [
        "# adamctl device profiles",
        "# Maps profile names to output module addresses",
        "",
    ]

    for profile in sorted(profiles, key=lambda p: p.name):
        lines.append(f"[profiles.{_toml_string(profile.name)}]")
        lines.append(f"host = {_toml_string(profile.host)}")
        lines.append(f"port = {profile.port}")
        if profile.description:
            lines.append(f"description = {_toml_string(profile.description)}")
        lines.append(f"created_at = {profile.created_at.isoformat()}")
        lines.append(f"modified_at = {profile.modified_at.isoformat()}")
        lines.append("")

    return "\n".join(lines)


class Database:
    """File-backed store for device profiles and trigger sequences."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._profiles_path = data_dir / PROFILES_FILE
        self._sequences_path = data_dir / SEQUENCES_FILE

    @property
    def path(self) -> Path:
        return self._data_dir

    @property
    def profiles_path(self) -> Path:
        return self._profiles_path

    @property
    def sequences_path(self) -> Path:
        return self._sequences_path

    def ensure_dirs(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)

    def load_profiles(self) -> list[DeviceProfile]:
        if not self._profiles_path.exists():
            return []

        try:
            with self._profiles_path.open("rb") as handle:
                data = tomllib.load(handle) or {}
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(
                f"Invalid TOML in profiles file: {self._profiles_path}\n{exc}"
            ) from exc

        try:
            return [
                DeviceProfile.model_validate({"name": name, **fields})
                for name, fields in data.get("profiles", {}).items()
            ]
        except ValidationError as exc:
            raise ValueError(
                f"Invalid profiles file: {self._profiles_path}\n{exc}"
            ) from exc

    def save_profiles(self, profiles: list[DeviceProfile]) -> None:
        self.ensure_dirs()
        self._profiles_path.write_text(_render_profiles_toml(profiles))

    def get_profile(self, name: str) -> DeviceProfile | None:
        for profile in self.load_profiles():
            if profile.name == name:
                return profile
        return None

    def add_profile(
        self, name: str, host: str, port: int, description: str = ""
    ) -> DeviceProfile:
        """Add a profile or update the one with the same name."""
        profiles = self.load_profiles()
        existing = next((p for p in profiles if p.name == name), None)
        profile = DeviceProfile(
            name=name,
            host=host,
            port=port,
            description=description,
            created_at=existing.created_at if existing else datetime.now(),
        )
        profiles = [p for p in profiles if p.name != name]
        profiles.append(profile)
        self.save_profiles(profiles)
        return profile

    def remove_profile(self, name: str) -> bool:
        profiles = self.load_profiles()
        remaining = [p for p in profiles if p.name != name]
        if len(remaining) == len(profiles):
            return False
        self.save_profiles(remaining)
        return True

    def load_sequences(self) -> list[TriggerSequence]:
        """Load saved sequences; first-time users get an example sequence."""
        if not self._sequences_path.exists():
            return [example_sequence()]

        try:
            return SequenceList.validate_json(self._sequences_path.read_bytes())
        except ValidationError as exc:
            raise ValueError(
                f"Invalid sequences file: {self._sequences_path}\n{exc}"
            ) from exc

    def save_sequences(self, sequences: list[TriggerSequence]) -> None:
        self.ensure_dirs()
        self._sequences_path.write_bytes(SequenceList.dump_json(sequences, indent=2))

    def get_sequence(self, name: str) -> TriggerSequence | None:
        for sequence in self.load_sequences():
            if sequence.name == name or str(sequence.id) == name:
                return sequence
        return None

    def save_sequence(self, sequence: TriggerSequence) -> None:
        """Insert a sequence or replace the stored one with the same id."""
        sequences = self.load_sequences()
        for index, existing in enumerate(sequences):
            if existing.id == sequence.id:
                sequences[index] = sequence
                break
        else:
            sequences.append(sequence)
        self.save_sequences(sequences)

    def remove_sequence(self, name: str) -> bool:
        sequences = self.load_sequences()
        remaining = [s for s in sequences if s.name != name and str(s.id) != name]
        if len(remaining) == len(sequences):
            return False
        self.save_sequences(remaining)
        return True

    def init(self) -> None:
        self.ensure_dirs()
        if not self._profiles_path.exists():
            self.save_profiles([])
        if not self._sequences_path.exists():
            self.save_sequences([example_sequence()])
