"""Entry point tying configuration, orchestrator and strategy together."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from .config import VersionConfig
from .errors import MonoverError, VersionErrorCode, version_error
from .models import ReleaseResult
from .orchestrator import ReleaseOrchestrator
from .strategies import STRATEGIES, Strategy, create_strategy

log = logging.getLogger(__name__)


class VersionEngine:
    """Runs one release for a configuration.

    Args:
        config: Run configuration.
        root: Repository root. Defaults to the current directory.
    """

    def __init__(self, config: VersionConfig, *, root: Path | None = None) -> None:
        self.config = config
        self.orchestrator = ReleaseOrchestrator(config, root=root)
        self.strategy: Strategy = create_strategy(config)

    def set_strategy(self, name: str) -> None:
        """Override the strategy picked from the configuration.

        Raises:
            VersionError: INVALID_CONFIG for an unknown strategy name.
        """
        try:
            self.strategy = STRATEGIES[name]()  # type: ignore[index]
        except KeyError:
            raise version_error(
                VersionErrorCode.INVALID_CONFIG, f"Unknown strategy: {name}"
            ) from None

    def run(self, targets: Sequence[str] = ()) -> ReleaseResult:
        """Apply the strategy and return what was released.

        Raises:
            MonoverError: Logged with its code, then re-raised.
        """
        log.debug("Running %s strategy", self.strategy.name)
        try:
            return self.strategy.apply(self.orchestrator, targets)
        except MonoverError as exc:
            log.error("%s strategy failed (%s)", self.strategy.name, exc.code)
            exc.log_error()
            raise
