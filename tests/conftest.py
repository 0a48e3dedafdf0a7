# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from ontask.config import DEFAULT_STATUS_SYMBOLS
from ontask.tasks.task_models import DEFAULT_RANK_TIERS


@pytest.fixture()
def vault(tmp_path: Path) -> Path:
    """A small on-disk vault with daily notes, a stream folder and a plain note."""
    root = tmp_path / "vault"
    (root / "Daily").mkdir(parents=True)
    (root / "Streams" / "Work").mkdir(parents=True)
    (root / ".obsidian").mkdir()

    (root / "Daily" / "2024-01-14.md").write_text("- [ ] old todo\n- [x] old done\n", "utf-8")
    (root / "Daily" / "2024-01-15.md").write_text("- [/] doing\n- [!] urgent\ntext\n", "utf-8")
    (root / "Streams" / "Work" / "project.md").write_text("- [+] next up\n", "utf-8")
    (root / "notes.md").write_text("- [?] question\n", "utf-8")
    (root / ".obsidian" / "hidden.md").write_text("- [ ] hidden\n", "utf-8")
    (root / "image.png").write_bytes(b"\x89PNG")
    return root


@pytest.fixture()
def settings(tmp_path: Path, vault: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the controller.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="ontask-test",
        log_level="INFO",
        data_dir=tmp_path / "data",
        vault_root=vault,
        streams=["Streams/Work"],
        daily_notes_enabled=True,
        custom_folder_path="",
        include_subfolders=True,
        load_more_limit=2,
        only_show_today=False,
        status_filters={s: True for s in DEFAULT_STATUS_SYMBOLS},
        top_task_tiers=DEFAULT_RANK_TIERS,
    )
