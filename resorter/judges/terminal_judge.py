"""
Terminal judge implementation.

Asks the human at the keyboard which of two items is better.
"""

from collections.abc import Callable

from typing_extensions import override

from ..exceptions import OracleAbortedError
from ..interfaces import Judge
from ..logging_config import get_logger
from ..models import Outcome, RatedItem

# Module-level logger
logger = get_logger("terminal_judge")

ANSWERS: dict[str, Outcome] = {
    "1": Outcome.LEFT,
    "l": Outcome.LEFT,
    "left": Outcome.LEFT,
    "": Outcome.EQUAL,
    "=": Outcome.EQUAL,
    "e": Outcome.EQUAL,
    "equal": Outcome.EQUAL,
    "2": Outcome.RIGHT,
    "r": Outcome.RIGHT,
    "right": Outcome.RIGHT,
}


class TerminalJudge(Judge):
    """
    Interactive judge reading one answer line per comparison.

    An empty answer means "equal", the default choice. There is no re-prompt:
    an unrecognized answer, EOF or Ctrl-C aborts the run.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] | None = None,
        output_func: Callable[[str], None] | None = None,
    ):
        """
        Initialize terminal judge.

        Args:
            input_func: Reads one answer line given a prompt (default: input)
            output_func: Writes one line of the question (default: print)
        """
        self.input_func = input_func or input
        self.output_func = output_func or print

    @override
    def compare(self, left: RatedItem, right: RatedItem) -> Outcome:
        """Show the pair and read the answer."""
        self.output_func("Which is better?")
        self.output_func(f"  1. {left.name}")
        self.output_func("  =  equal")
        self.output_func(f"  2. {right.name}")

        try:
            answer = self.input_func("[1/=/2, default =]: ")
        except (EOFError, KeyboardInterrupt) as e:
            raise OracleAbortedError(
                f"Comparison of {left.name!r} vs {right.name!r} was cancelled"
            ) from e

        outcome = ANSWERS.get(answer.strip().lower())
        if outcome is None:
            raise OracleAbortedError(
                f"Unrecognized answer {answer!r} for {left.name!r} vs {right.name!r}"
            )

        logger.debug(f"Answer for {left.name!r} vs {right.name!r}: {outcome.value}")
        return outcome
