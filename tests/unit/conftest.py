"""Shared test fixtures."""

from pathlib import Path

import pytest

from prompt_kanban.i18n import Translator
from tests.unit.fakes import FakeFileStore, FakeHost

SUMMARY_PROMPT = """\
# Summarizer

### V1.0

```
Summarize the text.
```

### V1.1

```
Summarize the text in three bullet points.
```
"""

TRANSLATE_PROMPT = """\
### Version 2
Translate to French.
"""

DRAFT = "Just a draft without any version heading."


@pytest.fixture
def store() -> FakeFileStore:
    """A store with a "prompts" folder holding three documents and one non-Markdown file."""
    fake = FakeFileStore()
    fake.add_file("prompts/summarizer.md", SUMMARY_PROMPT, mtime=100.0)
    fake.add_file("prompts/translate.md", TRANSLATE_PROMPT, mtime=300.0)
    fake.add_file("prompts/draft.md", DRAFT, mtime=200.0)
    fake.add_file("prompts/notes.txt", "not a prompt", mtime=400.0)
    fake.add_folder("prompts/archive")
    fake.add_folder("empty")
    return fake


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def translate() -> Translator:
    return Translator("en")


@pytest.fixture
def prompts_dir(tmp_path: Path) -> Path:
    """A real directory tree for the local store and the CLI."""
    folder = tmp_path / "prompts"
    folder.mkdir()
    (folder / "summarizer.md").write_text(SUMMARY_PROMPT, encoding="utf-8")
    (folder / "draft.md").write_text(DRAFT, encoding="utf-8")
    return tmp_path
