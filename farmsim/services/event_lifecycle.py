"""Pure state transitions for multi-day events.

    scheduled(n) ──apply──▶ active(n-1) ──apply──▶ ... ──apply──▶ ended

A lifecycle with one day remaining ends on its next application.
"""

from __future__ import annotations

from farmsim.models.enums import EventPhaseEnum
from farmsim.schemas.events import EventLifecycle, PendingEvent


def begin(duration: int) -> EventLifecycle:
	return EventLifecycle(phase=EventPhaseEnum.scheduled, days_remaining=max(1, int(duration)))


def advance(lifecycle: EventLifecycle) -> EventLifecycle:
	if lifecycle.phase == EventPhaseEnum.ended:
		return lifecycle
	if lifecycle.days_remaining > 1:
		return EventLifecycle(phase=EventPhaseEnum.active, days_remaining=lifecycle.days_remaining - 1)
	return EventLifecycle(phase=EventPhaseEnum.ended, days_remaining=0)


def lifecycle_of(event: PendingEvent) -> EventLifecycle:
	if event.lifecycle is not None:
		return event.lifecycle
	return begin(event.duration or 1)


def continuation(event: PendingEvent, lifecycle: EventLifecycle, message: str | None) -> PendingEvent:
	"""The record that carries ``event`` into the following day."""
	return event.model_copy(
		update={
			"day": event.day + 1,
			"duration": lifecycle.days_remaining,
			"lifecycle": lifecycle,
			"message": message or event.message,
		}
	)
