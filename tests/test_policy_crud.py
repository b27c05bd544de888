"""
Tests for rule queries and mutations.
Every test runs against both storage variants.
"""

import pytest

from pmec import Model


HASHED_MODEL = """
[request_definition]
r = sub, obj, act

[policy_definition]
p = sub, obj, act
p2 = sub, act

[role_definition]

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = r.sub == p.sub && r.obj == p.obj && r.act == p.act
"""

ORDERED_MODEL = """
[request_definition]
r = sub, obj, act

[policy_definition]
p = sub, obj, act
p2 = sub, act

[role_definition]
g = _, _

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = g(r.sub, p.sub) && keyMatch(r.obj, p.obj) && r.act == p.act
"""

ALICE_READ = ["alice", "data1", "read"]
ALICE_WRITE = ["alice", "data1", "write"]
BOB_READ = ["bob", "data2", "read"]
CAROL_READ = ["carol", "data3", "read"]


@pytest.fixture(params=[HASHED_MODEL, ORDERED_MODEL], ids=["hashed", "ordered"])
def model(request):
    return Model.from_text(request.param)


def seeded(model):
    for rule in (ALICE_READ, ALICE_WRITE, BOB_READ):
        model.add_policy("p", "p", rule)
    return model


class TestModelVariants:
    """Test that the fixtures exercise both variants."""

    def test_variants(self):
        """Test the storage chosen for each fixture model."""
        assert Model.from_text(HASHED_MODEL)["p"]["p"].uses_hashed_storage
        assert not Model.from_text(ORDERED_MODEL)["p"]["p"].uses_hashed_storage


class TestAddPolicy:
    """Test adding rules."""

    def test_add_and_has(self, model):
        """Test that an added rule is found."""
        assert model.add_policy("p", "p", ALICE_READ) is True
        assert model.has_policy("p", "p", ALICE_READ)
        assert not model.has_policy("p", "p", BOB_READ)

    def test_duplicate_add_keeps_one_rule(self, model):
        """Test that adding the same rule twice stores it once."""
        assert model.add_policy("p", "p", ["alice", "data1", "read"]) is True
        assert model.add_policy("p", "p", ["alice", "data1", "read"]) is False

        assert model.get_policy("p", "p") == [["alice", "data1", "read"]]

    def test_add_policies(self, model):
        """Test adding several new rules."""
        assert model.add_policies("p", "p", [ALICE_READ, BOB_READ]) is True

        assert model.get_policy("p", "p") == [ALICE_READ, BOB_READ]

    def test_add_policies_is_atomic(self, model):
        """Test that one existing rule blocks the whole batch."""
        model.add_policy("p", "p", ALICE_READ)

        assert model.add_policies("p", "p", [ALICE_READ, BOB_READ]) is False

        assert model.get_policy("p", "p") == [ALICE_READ]
        assert not model.has_policy("p", "p", BOB_READ)

    def test_add_policies_accepts_generators(self, model):
        """Test that any iterable of rules works."""
        rules = (rule for rule in [ALICE_READ, BOB_READ])

        assert model.add_policies("p", "p", rules) is True
        assert len(model.get_policy("p", "p")) == 2

    def test_no_duplicates_after_mixed_adds(self, model):
        """Test the no-duplicate invariant across add calls."""
        model.add_policy("p", "p", ALICE_READ)
        model.add_policies("p", "p", [BOB_READ, CAROL_READ])
        model.add_policy("p", "p", BOB_READ)
        model.add_policies("p", "p", [CAROL_READ, ALICE_WRITE])

        rules = [tuple(r) for r in model.get_policy("p", "p")]
        assert len(rules) == len(set(rules)) == 3


class TestQueries:
    """Test read-only queries."""

    def test_get_policy_order(self, model):
        """Test that rules come back in insertion order."""
        seeded(model)

        assert model.get_policy("p", "p") == [ALICE_READ, ALICE_WRITE, BOB_READ]

    def test_get_policy_returns_copies(self, model):
        """Test that callers cannot mutate the store through results."""
        seeded(model)

        rules = model.get_policy("p", "p")
        rules.clear()

        assert len(model.get_policy("p", "p")) == 3

    def test_filtered_by_first_field(self, model):
        """Test filtering on the subject column."""
        seeded(model)

        assert model.get_filtered_policy("p", "p", 0, "alice") == [ALICE_READ, ALICE_WRITE]

    def test_filtered_with_wildcard(self, model):
        """Test that an empty filter value matches anything."""
        seeded(model)

        assert model.get_filtered_policy("p", "p", 1, "", "read") == [ALICE_READ, BOB_READ]

    def test_filtered_past_row_end(self, model):
        """Test that filters beyond the row length never match."""
        seeded(model)

        assert model.get_filtered_policy("p", "p", 2, "read", "extra") == []

    def test_negative_field_index(self, model):
        """Test that a negative column never reads from the row end."""
        seeded(model)

        assert model.get_filtered_policy("p", "p", -1, "read") == []
        assert model.get_values_for_field_in_policy("p", "p", -1) == []
        assert model.get_values_for_field_in_policy_all_types("p", -1) == []
        assert model.remove_filtered_policy("p", "p", -3, "alice") == (False, [])
        assert len(model.get_policy("p", "p")) == 3

    def test_filtered_without_values(self, model):
        """Test that no filter values return every rule."""
        seeded(model)

        assert len(model.get_filtered_policy("p", "p", 0)) == 3

    def test_values_for_field(self, model):
        """Test that column values are distinct and first-seen ordered."""
        seeded(model)

        assert model.get_values_for_field_in_policy("p", "p", 0) == ["alice", "bob"]
        assert model.get_values_for_field_in_policy("p", "p", 2) == ["read", "write"]

    def test_values_for_field_all_types(self, model):
        """Test that values are merged across p and p2."""
        seeded(model)
        model.add_policy("p", "p2", ["dave", "read"])
        model.add_policy("p", "p2", ["alice", "admin"])

        assert model.get_values_for_field_in_policy_all_types("p", 0) == ["alice", "bob", "dave"]

    def test_unknown_type(self, model):
        """Test that an unknown type reads as empty."""
        assert model.get_policy("p", "p9") == []
        assert model.get_filtered_policy("x", "x", 0, "a") == []
        assert model.has_policy("p", "p9", ALICE_READ) is False
        assert model.get_values_for_field_in_policy("p", "p9", 0) == []
        assert model.get_values_for_field_in_policy_all_types("x", 0) == []


class TestUpdatePolicy:
    """Test replacing rules."""

    def test_update(self, model):
        """Test that the old rule is replaced by the new one."""
        seeded(model)

        assert model.update_policy("p", "p", ALICE_READ, CAROL_READ) is True

        assert not model.has_policy("p", "p", ALICE_READ)
        assert model.has_policy("p", "p", CAROL_READ)

    def test_update_missing_old(self, model):
        """Test that a missing old rule leaves the store unchanged."""
        seeded(model)
        before = model.get_policy("p", "p")

        assert model.update_policy("p", "p", CAROL_READ, ["dave", "x", "y"]) is False

        assert model.get_policy("p", "p") == before

    def test_update_to_existing_rule(self, model):
        """Test that an existing new rule is not inserted twice."""
        seeded(model)

        assert model.update_policy("p", "p", ALICE_READ, BOB_READ) is False

        assert model.get_policy("p", "p") == [ALICE_WRITE, BOB_READ]

    def test_update_to_same_rule(self, model):
        """Test replacing a rule with itself."""
        seeded(model)

        assert model.update_policy("p", "p", ALICE_READ, ALICE_READ) is True
        assert model.has_policy("p", "p", ALICE_READ)

    def test_update_policies(self, model):
        """Test replacing several rules at once."""
        seeded(model)

        assert model.update_policies(
            "p", "p", [ALICE_READ, BOB_READ], [CAROL_READ, ["dave", "d", "read"]]
        ) is True

        assert model.get_policy("p", "p") == [
            ALICE_WRITE,
            CAROL_READ,
            ["dave", "d", "read"],
        ]

    def test_update_policies_missing_old_is_atomic(self, model):
        """Test that a missing old rule leaves earlier olds in place."""
        seeded(model)
        before = model.get_policy("p", "p")

        assert model.update_policies(
            "p", "p", [ALICE_READ, CAROL_READ], [["x", "y", "z"], ["u", "v", "w"]]
        ) is False

        assert model.get_policy("p", "p") == before

    def test_update_policies_existing_new_is_atomic(self, model):
        """Test that an existing new rule blocks the update."""
        seeded(model)
        before = model.get_policy("p", "p")

        assert model.update_policies("p", "p", [ALICE_READ], [BOB_READ]) is False

        assert model.get_policy("p", "p") == before

    def test_update_policies_may_reinsert_removed(self, model):
        """Test that a new rule may equal one of the removed rules."""
        seeded(model)

        assert model.update_policies("p", "p", [ALICE_READ], [ALICE_READ]) is True
        assert model.get_policy("p", "p") == [ALICE_WRITE, BOB_READ, ALICE_READ]

    def test_update_unknown_type(self, model):
        """Test that updates of unknown types fail."""
        assert model.update_policy("p", "p9", ALICE_READ, BOB_READ) is False
        assert model.update_policies("p", "p9", [ALICE_READ], [BOB_READ]) is False


class TestRemovePolicy:
    """Test removing rules."""

    def test_remove(self, model):
        """Test removing a present and an absent rule."""
        seeded(model)

        assert model.remove_policy("p", "p", ALICE_READ) is True
        assert model.remove_policy("p", "p", ALICE_READ) is False
        assert model.get_policy("p", "p") == [ALICE_WRITE, BOB_READ]

    def test_remove_policies(self, model):
        """Test removing several rules."""
        seeded(model)

        assert model.remove_policies("p", "p", [ALICE_READ, BOB_READ]) is True
        assert model.get_policy("p", "p") == [ALICE_WRITE]

    def test_remove_policies_is_atomic(self, model):
        """Test that one missing rule blocks the whole batch."""
        seeded(model)

        assert model.remove_policies("p", "p", [ALICE_READ, CAROL_READ]) is False
        assert model.has_policy("p", "p", ALICE_READ)
        assert len(model.get_policy("p", "p")) == 3

    def test_remove_filtered(self, model):
        """Test that matched rules are removed and returned."""
        seeded(model)
        original = model.get_policy("p", "p")

        removed_any, removed = model.remove_filtered_policy("p", "p", 0, "alice")

        assert removed_any is True
        assert removed == [ALICE_READ, ALICE_WRITE]
        remaining = model.get_policy("p", "p")
        assert remaining == [r for r in original if r not in removed]
        assert all(r[0] == "alice" for r in removed)
        assert all(r[0] != "alice" for r in remaining)

    def test_remove_filtered_with_wildcard(self, model):
        """Test filtered removal with an empty filter value."""
        seeded(model)

        removed_any, removed = model.remove_filtered_policy("p", "p", 1, "", "read")

        assert removed_any is True
        assert removed == [ALICE_READ, BOB_READ]
        assert model.get_policy("p", "p") == [ALICE_WRITE]

    def test_remove_filtered_no_match(self, model):
        """Test that a filter without matches changes nothing."""
        seeded(model)

        assert model.remove_filtered_policy("p", "p", 0, "nobody") == (False, [])
        assert len(model.get_policy("p", "p")) == 3

    def test_remove_unknown_type(self, model):
        """Test that removals of unknown types fail."""
        assert model.remove_policy("p", "p9", ALICE_READ) is False
        assert model.remove_policies("p", "p9", [ALICE_READ]) is False
        assert model.remove_filtered_policy("p", "p9", 0, "alice") == (False, [])
        assert model.add_policy("p", "p9", ALICE_READ) is False
        assert model.add_policies("p", "p9", [ALICE_READ]) is False


class TestClearPolicy:
    """Test clearing every rule set."""

    def test_clear(self):
        """Test that p and g rules are all removed."""
        model = Model.from_text(ORDERED_MODEL)
        seeded(model)
        model.add_policy("p", "p2", ["alice", "read"])
        model.add_policy("g", "g", ["alice", "admin"])

        model.clear_policy()

        assert model.get_policy("p", "p") == []
        assert model.get_policy("p", "p2") == []
        assert model.get_policy("g", "g") == []

    def test_clear_keeps_definitions(self):
        """Test that definitions and storage survive a clear."""
        model = Model.from_text(HASHED_MODEL)
        store = model["p"]["p"].policy
        seeded(model)

        model.clear_policy()

        assert model["p"]["p"].policy is store
        assert model.add_policy("p", "p", ALICE_READ) is True
