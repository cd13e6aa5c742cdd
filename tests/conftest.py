from __future__ import annotations

from typing import Generator

import pytest

from spm_audit.utils.console import reconfigure_console
from spm_audit.utils.logger import disable_logging


@pytest.fixture(autouse=True)
def reset_spm_audit_state() -> Generator[None, None, None]:
    """Undo logging and console setup done by CLI invocations."""
    yield

    disable_logging()
    reconfigure_console()
