from abc import ABC, abstractmethod
from collections.abc import Sequence


class AbstractSubmissionSink(ABC):
	"""Interface for append-only stores that receive one row per submission."""

	@abstractmethod
	async def append_row(self, row: Sequence[str]) -> None:
		"""Append a single row of cell values.

		Args:
			row: Ordered cell values (timestamp, name, genre, description).

		Raises:
			SinkAppError: If the store is unreachable, rejects the write or is
				not configured. Implementations may also let transport errors
				propagate; callers treat any exception as a failed append.
		"""
		...
