from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from components import Dependency
from wiring import inject

if TYPE_CHECKING:
    from decimal import Decimal


class StringAnnotatedInjectMethod:
    base_called = 0

    @inject
    def install(self, dependency: Dependency):
        self.base_called += 1


class StringAnnotatedFields:
    dependency: Annotated[Dependency, inject]
    price: Decimal
