"""Value objects and run state for the demo pipeline."""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class DemoState(str, Enum):
    REQUESTED = "requested"
    AUTHORIZED = "authorized"
    STAGED = "staged"
    RESOLVED = "resolved"
    PUBLISHED = "published"
    RECORDED = "recorded"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StagedArchive:
    work_id: str
    zip_path: Path
    extract_dir: Path


@dataclass(frozen=True, slots=True)
class ResolvedSite:
    deploy_dir: Path
    is_placeholder: bool = False


@dataclass(frozen=True, slots=True)
class SiteSubdirectory:
    deploy_dir: Path
    subpath: str = ""


@dataclass(frozen=True, slots=True)
class DemoDetails:
    has_demo: bool
    demo_url: Optional[str] = None


@dataclass(slots=True)
class DemoRun:
    """Tracks one generation attempt through its states."""

    template_id: str
    demo_id: Optional[str] = None
    state: DemoState = DemoState.REQUESTED
    failed_stage: Optional[str] = None
    reason: Optional[str] = None

    def advance(self, state: DemoState) -> None:
        logger.info(
            "Demo %s for template %s: %s -> %s",
            self.demo_id or "-",
            self.template_id,
            self.state.value,
            state.value,
        )
        self.state = state

    def fail(self, stage: str, reason: str) -> None:
        logger.error(
            "Demo %s for template %s failed in %s after %s: %s",
            self.demo_id or "-",
            self.template_id,
            stage,
            self.state.value,
            reason,
        )
        self.failed_stage = stage
        self.reason = reason
        self.state = DemoState.FAILED


def new_demo_id(template_id: str) -> str:
    """``demo-<template>-<epoch ms>-<nonce>``; unique per generation."""
    return f"demo-{template_id}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"
