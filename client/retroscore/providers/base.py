from abc import ABC, abstractmethod

from retroscore.models.match import MatchChallenge
from retroscore.models.prediction import SubmissionPayload
from retroscore.models.result import RoundResult


class GameProvider(ABC):
    """What the session controller needs from the game backend."""

    @abstractmethod
    async def fetch_random_match(self) -> MatchChallenge:
        """Fetch the next match to predict.

        Raises NetworkError or ServerError. Never retries internally.
        """
        ...

    @abstractmethod
    async def submit_guess(self, payload: SubmissionPayload) -> RoundResult:
        """Submit one guess and return the server verdict.

        Raises NetworkError or ServerError. The backend does not deduplicate;
        callers must send at most one guess per round.
        """
        ...
