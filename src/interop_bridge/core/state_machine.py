# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import asyncio
from enum import Enum, auto
from typing import Self


class States(Enum):
    """Lifecycle states of the engine"""

    INITIALIZING = auto()
    RUNNING = auto()
    SHUTDOWN_REQUESTED = auto()
    ERROR = auto()


class StateMachine:
    """
    Keeps track of the engine's lifecycle state.

    Transitions are validated against a fixed table. Entering a terminal
    state wakes every task waiting for the shutdown.
    """

    def __init__(self: Self, initial_state: States = States.INITIALIZING) -> None:
        self._state: States = initial_state
        self._transitions = self._define_transitions()

    def _define_transitions(self: Self) -> dict[States, list[States]]:
        return {
            States.INITIALIZING: [
                States.RUNNING,
                States.SHUTDOWN_REQUESTED,
                States.ERROR,
            ],
            States.RUNNING: [States.ERROR, States.SHUTDOWN_REQUESTED],
            States.ERROR: [States.RUNNING, States.SHUTDOWN_REQUESTED, States.ERROR],
            States.SHUTDOWN_REQUESTED: [],
        }

    def transition_to(self: Self, new_state: States) -> None:
        """Transition to a new state if allowed"""
        if new_state == self._state and new_state not in {
            States.SHUTDOWN_REQUESTED,
            States.ERROR,
        }:
            return

        if new_state not in self._transitions.get(self._state, []):
            raise ValueError(
                f"Invalid state transition from {self._state} to {new_state}",
            )

        self._state = new_state

        if new_state in {States.SHUTDOWN_REQUESTED, States.ERROR} and hasattr(
            self,
            "_shutdown_event",
        ):
            self._shutdown_event.set()

    @property
    def state(self: Self) -> States:
        return self._state

    async def wait_for_shutdown(self: Self) -> None:
        """Block until a shutdown was requested or an error occurred"""
        if self._state in {States.SHUTDOWN_REQUESTED, States.ERROR}:
            return

        if not hasattr(self, "_shutdown_event"):
            self._shutdown_event = asyncio.Event()

        await self._shutdown_event.wait()
