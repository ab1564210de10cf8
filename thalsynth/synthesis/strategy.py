"""Interchangeable generation strategies: local computation or a remote service."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

import numpy as np
import requests

from thalsynth.config import PanelConfig
from thalsynth.data.records import AnnotatedRecord, Record
from thalsynth.errors import RemoteGenerationError
from thalsynth.synthesis.synthesizer import RecordSynthesizer, check_request, synthetic_id

logger = logging.getLogger(__name__)


class SyntheticGenerator(ABC):
    """Anything that turns annotated source rows into *count* synthetic rows."""

    name: str = "generator"

    @abstractmethod
    def generate(self, records: Sequence[AnnotatedRecord], count: int) -> list[Record]:
        """Return exactly *count* synthetic records."""
        ...

    def run(self, records: Sequence[AnnotatedRecord], count: int) -> tuple[list[Record], str]:
        """Generate and return the rows with the name of the strategy that produced them."""
        return self.generate(records, count), self.name

    @staticmethod
    def check_request(records: Sequence[AnnotatedRecord], count: int) -> None:
        check_request(records, count)


class LocalGenerator(SyntheticGenerator):
    """In-process generation with :class:`RecordSynthesizer`."""

    name = "local"

    def __init__(
        self,
        config: PanelConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.synthesizer = RecordSynthesizer(config=config, rng=rng)

    def generate(self, records: Sequence[AnnotatedRecord], count: int) -> list[Record]:
        self.check_request(records, count)
        return self.synthesizer.generate(records, count)


class RemoteGenerator(SyntheticGenerator):
    """Delegate generation to an HTTP service exposing ``POST /generate``.

    The service receives ``{"rows": count, "original": [...]}`` and must
    answer with ``{"syntheticData": [...]}`` holding exactly *count* rows.
    """

    name = "remote"

    def __init__(
        self,
        base_url: str,
        config: PanelConfig | None = None,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.config = config or PanelConfig.default()
        self.timeout = timeout
        self.session = session

    def generate(self, records: Sequence[AnnotatedRecord], count: int) -> list[Record]:
        self.check_request(records, count)
        payload = {
            "rows": int(count),
            "original": [r.to_dict(self.config.flag_field) for r in records],
        }
        url = f"{self.base_url}/generate"
        post = self.session.post if self.session is not None else requests.post

        try:
            response = post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise RemoteGenerationError(f"Remote generation at {url} failed: {e}") from e
        except ValueError as e:
            raise RemoteGenerationError(f"Remote generation at {url} returned invalid JSON") from e

        return self._normalize(body, count)

    def _normalize(self, body: Any, count: int) -> list[Record]:
        """Validate the remote rows and give them the local identifier scheme.

        Every row must carry the categorical and numeric fields and the
        provenance flag.  Identifiers sent by the service are replaced with
        ``P001``.. so they are unique within the output.
        """
        rows = body.get("syntheticData") if isinstance(body, dict) else None
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise RemoteGenerationError("Remote response has no 'syntheticData' row list")
        if len(rows) != count:
            raise RemoteGenerationError(
                f"Remote service returned {len(rows)} rows, expected {count}"
            )

        cfg = self.config
        required = [*cfg.categorical_fields, *cfg.numeric_fields, cfg.flag_field]
        out: list[Record] = []
        for i, row in enumerate(rows):
            missing = [f for f in required if f not in row]
            if missing:
                raise RemoteGenerationError(f"Remote row {i} is missing fields: {missing}")
            if not isinstance(row[cfg.flag_field], bool):
                raise RemoteGenerationError(
                    f"Remote row {i} has a non-boolean '{cfg.flag_field}'"
                )
            record: Record = {cfg.id_field: synthetic_id(i)}
            record.update((f, row[f]) for f in required)
            out.append(record)
        return out


class FallbackGenerator(SyntheticGenerator):
    """Try *primary* first; on :class:`RemoteGenerationError` use *fallback*.

    No state is kept between calls: :meth:`run` reports which of the two
    produced each result.
    """

    name = "fallback"

    def __init__(self, primary: SyntheticGenerator, fallback: SyntheticGenerator) -> None:
        self.primary = primary
        self.fallback = fallback

    def generate(self, records: Sequence[AnnotatedRecord], count: int) -> list[Record]:
        rows, _ = self.run(records, count)
        return rows

    def run(self, records: Sequence[AnnotatedRecord], count: int) -> tuple[list[Record], str]:
        self.check_request(records, count)
        try:
            return self.primary.run(records, count)
        except RemoteGenerationError as e:
            logger.warning("%s generator unavailable, using %s: %s",
                           self.primary.name, self.fallback.name, e)
            return self.fallback.run(records, count)
