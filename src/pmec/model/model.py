"""
The policy model: section definitions plus the live rule set.

Sections are loaded from CONF content into Assertion objects. Rules for
policy (p) and role (g) assertions are stored, queried and mutated here;
evaluating them against a request is someone else's job.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import (
    CONF_KEY_SEPARATOR,
    POLICY_SECTIONS,
    REQUIRED_SECTIONS,
    SECTION_MATCHER,
    SECTION_NAME_MAP,
    SECTION_POLICY,
    SECTION_READING_ORDER,
    SECTION_REQUEST,
    SECTION_ROLE,
    TOKEN_KEY_JOINER,
    TOKEN_SEPARATOR,
    TOKENIZED_SECTIONS,
)
from ..conf import Config
from ..errors import MissingRequiredSectionsError
from ..log import get_logger
from ..rbac import PolicyOp, RoleManager
from ..utils.text import (
    conjunction_skeleton,
    remove_comments,
    remove_duplicates,
    split_and_trim,
    strip_equalities,
)
from .assertion import Assertion
from .policy_store import new_policy_store

logger = get_logger(__name__)


class AssertionMap(dict):
    """Assertions of one section, keyed by policy type (p, p2, ...)."""
    pass


def _matches_filter(rule: Sequence[str], field_index: int, field_values: Sequence[str]) -> bool:
    if field_index < 0:
        return False
    for j, value in enumerate(field_values):
        if value == "":
            continue
        pos = field_index + j
        if pos >= len(rule) or rule[pos] != value:
            return False
    return True


class Model:
    """
    Authorization model and its rules.
    """

    def __init__(self):
        """Initialize an empty model."""
        self.model: Dict[str, AssertionMap] = {}

    # ==================== Construction ====================

    @classmethod
    def from_file(cls, path: str) -> 'Model':
        """
        Create a model from a CONF file.

        Args:
            path: Path to the model file

        Returns:
            Loaded Model

        Raises:
            ConfigFileNotFoundError: If the file does not exist
            MissingRequiredSectionsError: If a required section is absent
        """
        m = cls()
        m.load_model(path)
        return m

    @classmethod
    def from_text(cls, text: str) -> 'Model':
        """
        Create a model from CONF text.

        Args:
            text: Model definition text

        Returns:
            Loaded Model

        Raises:
            MissingRequiredSectionsError: If a required section is absent
        """
        m = cls()
        m.load_model_from_text(text)
        return m

    def load_model(self, path: str):
        """Load sections from a CONF file."""
        self.load_model_from_config(Config.new_config(path))

    def load_model_from_text(self, text: str):
        """Load sections from CONF text."""
        self.load_model_from_config(Config.new_config_from_text(text))

    def load_model_from_config(self, cfg):
        """
        Load every section from a configuration source.

        Sections are read as m, r, p, g, e: storage selection for p and g
        needs the matcher and request definitions.

        Args:
            cfg: Any object with get_string(path) -> str

        Raises:
            MissingRequiredSectionsError: Listing every absent required section
        """
        for sec in SECTION_READING_ORDER:
            self._load_section(cfg, sec)

        missing = [
            SECTION_NAME_MAP[sec]
            for sec in REQUIRED_SECTIONS
            if not self.has_section(sec)
        ]
        if missing:
            raise MissingRequiredSectionsError(missing)

        logger.debug("model_loaded", sections=sorted(self.model))

    def _load_section(self, cfg, sec: str):
        i = 1
        while self._load_assertion(cfg, sec, sec + self.get_key_suffix(i)):
            i += 1

    def _load_assertion(self, cfg, sec: str, key: str) -> bool:
        value = cfg.get_string(SECTION_NAME_MAP[sec] + CONF_KEY_SEPARATOR + key)
        return self.add_def(sec, key, value)

    @staticmethod
    def get_key_suffix(i: int) -> str:
        """Key suffix for the i-th definition of a section ("", "2", "3", ...)."""
        return "" if i == 1 else str(i)

    # ==================== Sections ====================

    def has_section(self, sec: str) -> bool:
        return sec in self.model

    def sections(self) -> List[str]:
        return list(self.model)

    def __contains__(self, sec: str) -> bool:
        return self.has_section(sec)

    def __getitem__(self, sec: str) -> AssertionMap:
        return self.model[sec]

    def get_assertion(self, sec: str, ptype: str) -> Optional[Assertion]:
        """The assertion registered under (sec, ptype), or None."""
        assertion_map = self.model.get(sec)
        if assertion_map is None:
            return None
        return assertion_map.get(ptype)

    def _hashed_storage_possible(self) -> bool:
        """
        Decide whether new p/g rule sets may live in a hash-backed store.

        True only when the matcher is exactly
        `r.f1 == p.f1 && r.f2 == p.f2 && ...` over every request field and
        there is no role section. Anything else keeps insertion order.
        """
        request = self.get_assertion(SECTION_REQUEST, SECTION_REQUEST)
        matcher = self.get_assertion(SECTION_MATCHER, SECTION_MATCHER)
        if request is None or matcher is None or not request.tokens:
            return False

        prefix_len = len(request.key) + len(TOKEN_KEY_JOINER)
        fields = [token[prefix_len:] for token in request.tokens]
        leftover = strip_equalities(matcher.value, fields)

        return (
            leftover == conjunction_skeleton(len(fields))
            and not self.has_section(SECTION_ROLE)
        )

    def add_def(self, sec: str, key: str, value: str) -> bool:
        """
        Build an assertion and register it in the model.

        Args:
            sec: Section id (r, p, g, e, m)
            key: Definition key (p, p2, g, ...)
            value: Definition text

        Returns:
            True if added; False for an empty value, or for a p/g
            definition arriving before both m and r exist
        """
        if value == "":
            return False

        if sec in POLICY_SECTIONS and not (
            self.has_section(SECTION_MATCHER) and self.has_section(SECTION_REQUEST)
        ):
            logger.warning("definition_skipped", sec=sec, key=key, reason="m and r not loaded")
            return False

        ast = Assertion(key=key, value=value)
        if sec in TOKENIZED_SECTIONS:
            ast.tokens = [
                key + TOKEN_KEY_JOINER + field
                for field in split_and_trim(value, TOKEN_SEPARATOR)
            ]
        else:
            ast.value = remove_comments(value)

        # Section is registered before storage selection so a role
        # definition counts itself as a g section
        assertion_map = self.model.setdefault(sec, AssertionMap())
        if sec in POLICY_SECTIONS:
            ast.policy = new_policy_store(self._hashed_storage_possible())

        assertion_map[key] = ast

        logger.debug(
            "assertion_added",
            sec=sec,
            key=key,
            value=ast.value,
            hashed=ast.uses_hashed_storage,
        )
        return True

    # ==================== Role Links ====================

    def build_role_links(self, rm: RoleManager):
        """
        Rebuild the role graph from every grouping assertion.

        Args:
            rm: Role manager to rebuild
        """
        rm.clear()
        for ast in self.model.get(SECTION_ROLE, AssertionMap()).values():
            ast.build_role_links(rm)

    def build_incremental_role_links(
        self,
        rm: RoleManager,
        op: PolicyOp,
        sec: str,
        ptype: str,
        rules: Iterable[Sequence[str]],
    ):
        """
        Apply an add/remove delta to the role graph.

        Only grouping (g) sections are relevant; other sections are ignored.

        Args:
            rm: Role manager to update
            op: PolicyOp.ADD or PolicyOp.REMOVE
            sec: Section id
            ptype: Grouping type (g, g2, ...)
            rules: Rules that were added or removed
        """
        if sec != SECTION_ROLE:
            return

        ast = self.get_assertion(sec, ptype)
        if ast is None:
            logger.warning("unknown_role_definition", ptype=ptype)
            return

        ast.build_incremental_role_links(rm, op, rules)

    # ==================== Logging ====================

    def print_model(self):
        """Log every definition of the model."""
        logger.info("model")
        for sec, assertion_map in self.model.items():
            for key, ast in assertion_map.items():
                logger.info("definition", sec=sec, key=key, value=ast.value)

    def print_policy(self):
        """Log the current rules of every policy and role definition."""
        logger.info("policy")
        for sec in (SECTION_POLICY, SECTION_ROLE):
            for key, ast in self.model.get(sec, AssertionMap()).items():
                logger.info("rules", key=key, value=ast.value, rules=ast.policy.rows())

    # ==================== Rules ====================

    def clear_policy(self):
        """Remove every rule from every policy and role definition."""
        for sec in (SECTION_POLICY, SECTION_ROLE):
            for ast in self.model.get(sec, AssertionMap()).values():
                if ast.policy:
                    ast.policy.clear()

    def _get_store(self, sec: str, ptype: str):
        ast = self.get_assertion(sec, ptype)
        if ast is None:
            return None
        return ast.policy

    def get_policy(self, sec: str, ptype: str) -> List[List[str]]:
        """
        Get all rules of a definition.

        Args:
            sec: Section id
            ptype: Policy type

        Returns:
            Rules in store order
        """
        policy = self._get_store(sec, ptype)
        if policy is None:
            return []
        return policy.rows()

    def get_filtered_policy(
        self,
        sec: str,
        ptype: str,
        field_index: int,
        *field_values: str,
    ) -> List[List[str]]:
        """
        Get rules matching field filters.

        Args:
            sec: Section id
            ptype: Policy type
            field_index: Column the first filter value applies to
            *field_values: Values for consecutive columns; "" matches anything

        Returns:
            Matching rules in store order
        """
        policy = self._get_store(sec, ptype)
        if policy is None:
            return []
        return [
            list(rule)
            for rule in policy
            if _matches_filter(rule, field_index, field_values)
        ]

    def has_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Check whether an identical rule exists."""
        policy = self._get_store(sec, ptype)
        if policy is None:
            return False
        return policy.contains(rule)

    def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """
        Add a rule.

        Returns:
            True if added, False if it already existed
        """
        policy = self._get_store(sec, ptype)
        if policy is None:
            return False
        return policy.add(rule)

    def add_policies(self, sec: str, ptype: str, rules: Iterable[Sequence[str]]) -> bool:
        """
        Add several rules, all or nothing.

        Returns:
            False without adding anything if any rule already exists
        """
        policy = self._get_store(sec, ptype)
        if policy is None:
            return False

        rules = list(rules)
        for rule in rules:
            if policy.contains(rule):
                return False

        for rule in rules:
            policy.add(rule)
        return True

    def update_policy(
        self,
        sec: str,
        ptype: str,
        old_rule: Sequence[str],
        new_rule: Sequence[str],
    ) -> bool:
        """
        Replace one rule with another.

        The old rule is removed first. If the new rule is already present
        it is not inserted again and the call reports failure.

        Returns:
            True only if old_rule was removed and new_rule inserted
        """
        policy = self._get_store(sec, ptype)
        if policy is None:
            return False

        if not policy.remove(old_rule):
            return False

        return policy.add(new_rule)

    def update_policies(
        self,
        sec: str,
        ptype: str,
        old_rules: Iterable[Sequence[str]],
        new_rules: Iterable[Sequence[str]],
    ) -> bool:
        """
        Replace several rules at once.

        Changes are staged on a copy and applied only if every old rule
        exists and no new rule is already present after the removals.

        Returns:
            True if the whole update was applied
        """
        policy = self._get_store(sec, ptype)
        if policy is None:
            return False

        staged = policy.new_empty()
        staged.replace(policy)

        for rule in old_rules:
            if not staged.remove(rule):
                return False

        new_rules = list(new_rules)
        for rule in new_rules:
            if staged.contains(rule):
                return False

        for rule in new_rules:
            staged.add(rule)

        policy.replace(staged)
        return True

    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """
        Remove a rule.

        Returns:
            True if a rule was removed
        """
        policy = self._get_store(sec, ptype)
        if policy is None:
            return False
        return policy.remove(rule)

    def remove_policies(self, sec: str, ptype: str, rules: Iterable[Sequence[str]]) -> bool:
        """
        Remove several rules, all or nothing.

        Returns:
            False without removing anything if any rule is missing
        """
        policy = self._get_store(sec, ptype)
        if policy is None:
            return False

        rules = list(rules)
        for rule in rules:
            if not policy.contains(rule):
                return False

        for rule in rules:
            policy.remove_all(rule)
        return True

    def remove_filtered_policy(
        self,
        sec: str,
        ptype: str,
        field_index: int,
        *field_values: str,
    ) -> Tuple[bool, List[List[str]]]:
        """
        Remove rules matching field filters.

        Args:
            sec: Section id
            ptype: Policy type
            field_index: Column the first filter value applies to
            *field_values: Values for consecutive columns; "" matches anything

        Returns:
            (whether anything was removed, removed rules)
        """
        policy = self._get_store(sec, ptype)
        if policy is None:
            return False, []

        kept = []
        removed = []
        for rule in policy:
            if _matches_filter(rule, field_index, field_values):
                removed.append(list(rule))
            else:
                kept.append(rule)

        policy.replace(kept)
        return len(removed) > 0, removed

    def get_values_for_field_in_policy(self, sec: str, ptype: str, field_index: int) -> List[str]:
        """
        Distinct values of one column of a definition's rules.

        Returns:
            Values in first-seen order
        """
        policy = self._get_store(sec, ptype)
        if policy is None or field_index < 0:
            return []
        return remove_duplicates(
            rule[field_index] for rule in policy if field_index < len(rule)
        )

    def get_values_for_field_in_policy_all_types(self, sec: str, field_index: int) -> List[str]:
        """
        Distinct values of one column across every definition of a section.

        Returns:
            Values in first-seen order
        """
        values = []
        for ptype in self.model.get(sec, AssertionMap()):
            values.extend(self.get_values_for_field_in_policy(sec, ptype, field_index))
        return remove_duplicates(values)
