"""Progress counters derived from a QuizSession."""

from __future__ import annotations

from dataclasses import dataclass

from vocab_srs.study.quiz_session import QuizSession


@dataclass(frozen=True)
class ProgressSnapshot:
    current: int    # 1-based question number
    total: int      # Queue length, including requeued items
    remaining: int


class ProgressTracker:
    """Read-only view over a session's queue and counters."""

    def __init__(self, session: QuizSession):
        self.session = session

    def snapshot(self) -> ProgressSnapshot:
        total = len(self.session.queue)
        current = min(self.session.index + 1, total)
        return ProgressSnapshot(current=current, total=total, remaining=max(0, total - current))

    def session_stats(self) -> dict:
        results = self.session.results()
        return {
            "total_words": len(self.session.queue),
            "mastered_count": results.mastered_count,
            "correct_answers": results.correct_count,
            "total_attempts": results.total_attempts,
            "accuracy": results.accuracy_percent,
        }
