from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pytest

from seedgraph.domain.converters import ConverterRegistry
from seedgraph.domain.errors import MissingArgumentError
from seedgraph.domain.registry import TypeRegistry
from seedgraph.domain.scanner import GraphScanner
from tests.helpers.library import (
    Author,
    Book,
    BookAuthor,
    BookInventory,
    BorrowRecord,
    Category,
    Library,
    Member,
    MemberBookmark,
    MemberProfile,
    Publisher,
    Shelf,
    make_library_graph,
)


@dataclass(eq=False)
class Link:
    id: int = 0
    next_id: int | None = None
    next: Link | None = None


@dataclass(frozen=True)
class FrozenChild:
    id: int = 0
    parent_id: int | None = None
    parent: Category | None = None


@dataclass(eq=False)
class Money:
    amount: int = 0
    currency: str = "EUR"


@dataclass(eq=False)
class PricedItem:
    id: int = 0
    price: Money | None = None
    tags: list[str] = field(default_factory=list)


@dataclass(eq=False)
class Crate:
    id: int = 0
    slots: list[Slot] = field(default_factory=list)


@dataclass(eq=False)
class Slot:
    id: int = 0
    crate_id: int | None = None


def _scanner(converters: ConverterRegistry | None = None) -> tuple[GraphScanner, TypeRegistry]:
    registry = TypeRegistry()
    return GraphScanner(registry, converters), registry


def test_reference_sets_foreign_key_and_registers_target() -> None:
    scanner, registry = _scanner()
    category = Category(id=1, name="Fiction")
    book = Book(id=1, title="T", category=category)

    scanner.register(book)

    assert book.category_id == 1
    assert registry.get(Category) == (category,)
    assert registry.get(Book) == (book,)


def test_cyclic_back_reference_terminates() -> None:
    scanner, registry = _scanner()
    member = Member(id=1, name="Chris")
    profile = MemberProfile(id=1, member=member)
    member.profile = profile

    scanner.register(member)

    assert profile.member_id == 1
    assert registry.get(Member) == (member,)
    assert registry.get(MemberProfile) == (profile,)


def test_collection_items_get_back_reference_and_foreign_key() -> None:
    scanner, registry = _scanner()
    category = Category(id=5, name="Science")
    book = Book(id=10, title="Cells")
    category.books.append(book)

    scanner.register(category)

    assert book.category is category
    assert book.category_id == 5
    assert registry.get(Book) == (book,)


def test_self_referencing_hierarchy() -> None:
    scanner, registry = _scanner()
    root = Category(id=1, name="Root")
    child = Category(id=2, name="Child")
    grandchild = Category(id=3, name="Grandchild")
    root.sub_categories.append(child)
    child.sub_categories.append(grandchild)

    scanner.register(root)

    assert child.parent_category is root
    assert child.parent_category_id == 1
    assert grandchild.parent_category_id == 2
    assert root.parent_category_id is None
    assert registry.get(Category) == (root, child, grandchild)


def test_many_to_many_through_join_entity() -> None:
    scanner, registry = _scanner()
    book = Book(id=1, title="Starfall")
    author = Author(id=7, name="Ada")
    link = BookAuthor(id=3, author=author, role="Author")
    book.authors.append(link)
    author.books.append(link)

    scanner.register(book)

    assert link.book is book
    assert link.book_id == 1
    assert link.author_id == 7
    assert registry.get(Author) == (author,)
    assert registry.get(BookAuthor) == (link,)


def test_diamond_registers_shared_entity_once() -> None:
    scanner, registry = _scanner()
    publisher = Publisher(id=2, name="Orbit")
    first = Book(id=1, publisher=publisher)
    second = Book(id=2, publisher=publisher)
    shelf = Shelf(id=1)
    shelf.book_inventories.extend(
        [BookInventory(id=1, book=first), BookInventory(id=2, book=second)]
    )

    scanner.register(shelf)

    assert registry.get(Publisher) == (publisher,)
    assert registry.get(Book) == (first, second)
    assert first.publisher_id == second.publisher_id == 2
    assert [inventory.shelf_id for inventory in registry.get(BookInventory)] == [1, 1]


def test_foreign_key_written_on_every_edge_even_when_target_visited() -> None:
    scanner, _ = _scanner()
    category = Category(id=1)
    book = Book(id=1, category=category)
    scanner.register(category)

    category.id = 9
    scanner.register(book)

    assert book.category_id == 9


def test_deep_chain_does_not_hit_recursion_limit() -> None:
    scanner, registry = _scanner()
    head = Link(id=0)
    current = head
    for index in range(1, 5000):
        current.next = Link(id=index)
        current = current.next

    scanner.register(head)

    assert len(registry.get(Link)) == 5000
    assert head.next_id == 1


def test_registration_order_matches_depth_first_traversal() -> None:
    scanner, registry = _scanner()
    graph = make_library_graph()

    scanner.register(graph.library)

    assert registry.entity_types[:4] == (Library, Shelf, BookInventory, Book)
    assert registry.get(Shelf) == tuple(graph.shelves)


def test_full_library_graph_is_wired() -> None:
    scanner, registry = _scanner()
    graph = make_library_graph()

    scanner.register(graph.library)

    assert {shelf.library_id for shelf in graph.shelves} == {1}
    assert [book.category_id for book in graph.books] == [2, 1, 3]
    assert {book.publisher_id for book in graph.books} == {1}
    assert graph.categories[1].parent_category_id == 1
    assert graph.members[0].profile is not None
    assert graph.members[0].profile.member_id == 1
    assert graph.borrow_records[0].member_id == 1
    assert graph.borrow_records[0].book_id == 2
    assert graph.bookmarks[0].member_id == 2
    assert graph.bookmarks[0].book_id == 3
    assert len(registry.get(Member)) == 2
    assert len(registry.get(MemberBookmark)) == 1
    assert len(registry.get(BorrowRecord)) == 1
    assert len(registry.get(Category)) == 3


def test_item_without_back_reference_gets_inverse_foreign_key() -> None:
    scanner, _ = _scanner()
    crate = Crate(id=4, slots=[Slot(id=1), Slot(id=2)])

    scanner.register(crate)

    assert [slot.crate_id for slot in crate.slots] == [4, 4]


def test_scalar_collections_and_converter_fields_are_not_traversed() -> None:
    converters = ConverterRegistry()
    converters.register(Money, lambda money: f"{money.amount} {money.currency}")
    scanner, registry = _scanner(converters)
    item = PricedItem(id=1, price=Money(5), tags=["new", "sale"])

    scanner.register(item)

    assert registry.entity_types == (PricedItem,)


def test_failed_foreign_key_write_is_logged_and_skipped(
    caplog: pytest.LogCaptureFixture,
) -> None:
    scanner, registry = _scanner()
    parent = Category(id=3)
    child = FrozenChild(id=1, parent=parent)

    with caplog.at_level(logging.WARNING, logger="seedgraph.domain.scanner"):
        scanner.register(child)

    assert child.parent_id is None
    assert registry.get(Category) == (parent,)
    assert "Could not set FrozenChild.parent_id" in caplog.text


def test_register_rejects_none() -> None:
    scanner, _ = _scanner()

    with pytest.raises(MissingArgumentError):
        scanner.register(None)


def test_reset_clears_registry_and_visited_set() -> None:
    scanner, registry = _scanner()
    category = Category(id=1)
    book = Book(id=1, category=category)
    scanner.register(book)

    scanner.reset()
    category.id = 2
    scanner.register(category)

    assert len(registry) == 1
    assert book.category_id == 1
