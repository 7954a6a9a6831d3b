from __future__ import annotations

from dataclasses import dataclass

import pytest

from seedgraph.domain.converters import ConverterRegistry
from seedgraph.domain.errors import (
    ApplyError,
    KeyCollisionError,
    KeySynthesisExhaustedError,
    PrimaryKeyNotFoundError,
)
from seedgraph.domain.policy import DuplicatePolicy
from seedgraph.domain.reconciliation import ApplyResult, reconcile_into_store
from tests.helpers.library import Category
from tests.helpers.stores import FakeEntitySet


@dataclass(eq=False)
class Note:
    text: str = ""


class _ListSet:
    def __init__(self) -> None:
        self.items: list[object] = []

    def find(self, key: object) -> object | None:
        return None

    def add(self, entity: object) -> None:
        self.items.append(entity)

    def update(self, entity: object) -> None:
        pass


def _apply(
    entities: list[Category],
    policy: DuplicatePolicy,
    entity_set: FakeEntitySet[Category] | None = None,
) -> tuple[FakeEntitySet[Category], ApplyResult]:
    entity_set = entity_set if entity_set is not None else FakeEntitySet(Category)
    result = ApplyResult()
    reconcile_into_store(
        Category,
        entities,
        entity_set=entity_set,
        policy=policy,
        converters=ConverterRegistry(),
        result=result,
    )
    return entity_set, result


# --- HALT ---------------------------------------------------------------------


def test_halt_adds_distinct_keys() -> None:
    entity_set, result = _apply(
        [Category(id=1, name="a"), Category(id=2, name="b")], DuplicatePolicy.HALT
    )

    assert sorted(entity_set.records) == [1, 2]
    assert result.added == 2


def test_halt_raises_on_divergent_duplicate_in_run() -> None:
    with pytest.raises(ApplyError) as exc:
        _apply([Category(id=1, name="a"), Category(id=1, name="b")], DuplicatePolicy.HALT)

    cause = exc.value.__cause__
    assert isinstance(cause, KeyCollisionError)
    assert cause.key == 1
    assert cause.stored is False
    assert exc.value.entity_type is Category
    assert "Category" in str(exc.value)


def test_halt_raises_on_divergent_stored_record() -> None:
    stored = FakeEntitySet(Category, [Category(id=1, name="stored")])

    with pytest.raises(ApplyError) as exc:
        _apply([Category(id=1, name="incoming")], DuplicatePolicy.HALT, stored)

    cause = exc.value.__cause__
    assert isinstance(cause, KeyCollisionError)
    assert cause.stored is True
    assert stored.records[1].name == "stored"


def test_halt_treats_identical_values_as_unchanged() -> None:
    stored = FakeEntitySet(Category, [Category(id=1, name="same")])

    entity_set, result = _apply(
        [Category(id=1, name="same"), Category(id=1, name="same")], DuplicatePolicy.HALT, stored
    )

    assert entity_set.added == []
    assert result.unchanged == 2
    assert result.added == 0


# --- MERGE --------------------------------------------------------------------


def test_merge_overwrites_earlier_record_in_run() -> None:
    first = Category(id=1, name="first", description="kept?")
    second = Category(id=1, name="second")

    entity_set, result = _apply([first, second], DuplicatePolicy.MERGE)

    assert entity_set.records[1] is first
    assert first.name == "second"
    assert first.description is None
    assert entity_set.updated == [first]
    assert result.added == 1
    assert result.merged == 1


def test_merge_updates_stored_record_without_touching_its_key() -> None:
    stored_category = Category(id=7, name="old")
    stored = FakeEntitySet(Category, [stored_category])

    entity_set, result = _apply([Category(id=7, name="new")], DuplicatePolicy.MERGE, stored)

    assert entity_set.records[7] is stored_category
    assert stored_category.name == "new"
    assert stored_category.id == 7
    assert entity_set.updated == [stored_category]
    assert result.merged == 1


# --- SKIP ---------------------------------------------------------------------


def test_skip_keeps_first_record() -> None:
    first = Category(id=1, name="first")
    stored = FakeEntitySet(Category, [Category(id=2, name="stored")])

    entity_set, result = _apply(
        [first, Category(id=1, name="second"), Category(id=2, name="incoming")],
        DuplicatePolicy.SKIP,
        stored,
    )

    assert entity_set.records[1] is first
    assert first.name == "first"
    assert entity_set.records[2].name == "stored"
    assert result.added == 1
    assert result.skipped == 2


# --- ALWAYS_ADD ---------------------------------------------------------------


def test_always_add_rekeys_every_duplicate_uniquely() -> None:
    stored = FakeEntitySet(Category, [Category(id=1, name="stored"), Category(id=2)])
    batch = [Category(id=1, name="x"), Category(id=1, name="y"), Category(id=3, name="z")]

    entity_set, result = _apply(batch, DuplicatePolicy.ALWAYS_ADD, stored)

    keys = [category.id for category in batch]
    assert keys == [4, 5, 3]
    assert result.rekeyed == 2
    assert result.added == 3
    assert entity_set.records[1].name == "stored"


def test_always_add_does_not_take_a_key_declared_later_in_the_batch() -> None:
    first, duplicate, second = Category(id=1), Category(id=1), Category(id=2)

    entity_set, result = _apply([first, duplicate, second], DuplicatePolicy.ALWAYS_ADD)

    assert [first.id, duplicate.id, second.id] == [1, 3, 2]
    assert result.rekeyed == 1
    assert entity_set.records[2] is second


def test_always_add_reports_exhaustion() -> None:
    stored = FakeEntitySet(Category, [Category(id=key) for key in range(1, 103)])

    with pytest.raises(ApplyError) as exc:
        _apply([Category(id=1, name="late")], DuplicatePolicy.ALWAYS_ADD, stored)

    assert isinstance(exc.value.__cause__, KeySynthesisExhaustedError)


# --- Edge cases ---------------------------------------------------------------


@pytest.mark.parametrize("policy", list(DuplicatePolicy))
def test_missing_keys_are_always_added(policy: DuplicatePolicy) -> None:
    entity_set, result = _apply([Category(name="a"), Category(name="b")], policy)

    assert len(entity_set.added) == 2
    assert result.added == 2
    assert entity_set.lookups == []


def test_type_without_primary_key_is_wrapped() -> None:
    with pytest.raises(ApplyError) as exc:
        reconcile_into_store(
            Note,
            [Note("x")],
            entity_set=_ListSet(),
            policy=DuplicatePolicy.HALT,
            converters=ConverterRegistry(),
            result=ApplyResult(),
        )

    assert isinstance(exc.value.__cause__, PrimaryKeyNotFoundError)
    assert "Could not find primary key for type Note" in str(exc.value)


def test_returns_applied_entities_by_key() -> None:
    first = Category(id=1)

    entity_set = FakeEntitySet(Category)
    applied = reconcile_into_store(
        Category,
        [first, first],
        entity_set=entity_set,
        policy=DuplicatePolicy.HALT,
        converters=ConverterRegistry(),
        result=ApplyResult(),
    )

    assert applied == {1: first}
    assert entity_set.added == [first]
