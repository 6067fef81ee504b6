# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Non-interactive collaborators replaying a scripted answers document.

The answers document is YAML. Either a plain list of answers or a mapping:

    answers:          # consumed in question order
      - demo-meter    # choice by key or label, or an index
      - null          # take the default
      - 1000
      - yes
    eebus:
      certificate:    # returned by issue_certificate()
        public: ...
        private: ...
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Optional

from evconfigurator.configure.collaborators import EebusIntegration, Question, ValueProvider
from evconfigurator.errors import CollectionAbortedError
from evconfigurator.templates.model import Template, format_value
from evconfigurator.utils import coerce_bool, load_yaml_payload

logger = logging.getLogger(__name__)


class AnswersProvider(ValueProvider):
    """Answers questions from a queue; an exhausted queue aborts the session."""

    def __init__(self, answers: list[Any]):
        self._queue: deque[Any] = deque(answers)

    @classmethod
    def from_document(cls, document: Any) -> "AnswersProvider":
        if isinstance(document, dict):
            document = document.get("answers", []) or []
        if not isinstance(document, list):
            raise TypeError(f"Answers must be a YAML list, got {type(document).__name__}")
        return cls(document)

    @classmethod
    def from_file(cls, path: str) -> "AnswersProvider":
        return cls.from_document(load_yaml_payload(path))

    @property
    def remaining(self) -> int:
        return len(self._queue)

    def _next(self, label: str) -> Any:
        if not self._queue:
            raise CollectionAbortedError(f"No answer left for '{label}'")
        answer = self._queue.popleft()
        logger.debug("Answer for '%s': %r", label, answer)
        return answer

    def ask_value(self, question: Question) -> str:
        answer = self._next(question.label)
        if answer is None:
            answer = question.default
        text = format_value(answer)
        if question.required and not text:
            raise CollectionAbortedError(f"Value for '{question.label}' is required")
        return text

    def ask_yes_no(self, label: str, key: str = "") -> bool:
        answer = self._next(label)
        return bool(coerce_bool(answer))

    def ask_choice(self, label: str, choices: list[str], keys: Optional[list[str]] = None) -> int:
        answer = self._next(label)
        if isinstance(answer, int) and not isinstance(answer, bool):
            if 0 <= answer < len(choices):
                return answer
            raise CollectionAbortedError(f"Choice {answer} out of range for '{label}'")

        text = format_value(answer).strip().lower()
        for candidates in (keys or [], choices):
            for index, candidate in enumerate(candidates):
                if str(candidate).lower() == text:
                    return index
        raise CollectionAbortedError(f"'{answer}' is not a valid choice for '{label}'. Choices: {', '.join(choices)}")


class AnswersEebusIntegration(EebusIntegration):
    """EEBUS integration returning a scripted certificate and acknowledging every pairing."""

    def __init__(self, certificate: Optional[dict[str, Any]] = None):
        self.certificate = certificate
        self.paired: list[str] = []

    @classmethod
    def from_document(cls, document: Any) -> "AnswersEebusIntegration":
        certificate = None
        if isinstance(document, dict):
            certificate = (document.get("eebus") or {}).get("certificate")
        return cls(certificate)

    def issue_certificate(self) -> dict[str, Any]:
        if not self.certificate:
            raise ValueError("No EEBUS certificate in answers document")
        return {"certificate": dict(self.certificate)}

    def configure(self, certificate: dict[str, Any]) -> None:
        logger.debug("EEBUS certificate configured")

    def pair(self, template: Template) -> None:
        logger.info("Pairing with %s acknowledged", template.description)
        self.paired.append(template.template)
