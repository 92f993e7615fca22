"""Step renumbering for insertions into an ordered flow.

Computes which existing steps must move when one step is inserted after a
given position, so the flow's step numbers stay a contiguous 1..N sequence.
The result must be applied before the new step is inserted.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import StepNumberChange, StepPosition


class StepRenumberer:
    """Computes renumbering batches. Stateless."""

    def renumber(
        self,
        existing_steps: Sequence[StepPosition],
        insert_after: int,
    ) -> list[StepNumberChange]:
        """Compute the changes needed to open a slot at insert_after + 1.

        Every step numbered strictly above insert_after moves up by exactly
        one; steps at or below it are untouched.

        Args:
            existing_steps: Current (id, step_number) of every step in the flow.
            insert_after: Position after which the new step will be inserted.
                Zero inserts at the front.

        Returns:
            Only the steps whose number changes, in ascending original order.

        Raises:
            ValueError: If insert_after is negative.
        """
        if insert_after < 0:
            msg = f"insert_after must be >= 0, got {insert_after}"
            raise ValueError(msg)

        shifted = sorted(
            (step for step in existing_steps if step.step_number > insert_after),
            key=lambda step: step.step_number,
        )
        return [
            StepNumberChange(step_id=step.id, new_step_number=step.step_number + 1)
            for step in shifted
        ]

    def revert(self, changes: Sequence[StepNumberChange]) -> list[StepNumberChange]:
        """Compute the batch that undoes a previously applied renumbering.

        Args:
            changes: A batch returned by renumber() that has been applied.

        Returns:
            Changes moving each step back down by one.
        """
        return [
            StepNumberChange(step_id=change.step_id, new_step_number=change.new_step_number - 1)
            for change in changes
        ]
