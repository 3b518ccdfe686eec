from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import LabBatch, Subject


class SubjectRepository(Protocol):
    def list_by_class(self, class_id: int) -> Sequence[Subject]:
        raise NotImplementedError

    def get_by_id(self, subject_id: int) -> Optional[Subject]:
        raise NotImplementedError

    def replace_batches(self, subject_id: int, batches: Sequence[LabBatch]) -> None:
        """Replace every batch of a lab subject (names and members)."""

        raise NotImplementedError
