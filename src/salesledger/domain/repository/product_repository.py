"""Product repository contract.

Implementations stage writes in the enclosing unit of work; nothing
reaches the store before ``UnitOfWork.commit()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from salesledger.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Allocate an id for a product not yet saved."""

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        ...

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Case-insensitive catalog lookup; None when nothing matches."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Whole catalog in id order."""

    @abstractmethod
    def save(self, product: Product) -> None:
        ...
