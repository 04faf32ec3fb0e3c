# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Placement rules and the parser for the ``daemonset`` label value.

Label grammar::

    all                                  one instance per active node
    <attr>|<value>[,<attr>|<value>...]   one instance per node matching each pair
"""

import logging
from dataclasses import dataclass
from typing import Tuple, Union

from daemonset.reconciler.defaults import (
    ATTRIBUTE_VALUE_SEPARATOR,
    LABEL_ALL_VALUE,
    PREDICATE_SEPARATOR,
)
from daemonset.runtime.logging import configure_daemonset_logging

configure_daemonset_logging()
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttributePredicate:
    name: str
    value: str


@dataclass(frozen=True)
class AllNodes:
    def describe(self) -> str:
        return LABEL_ALL_VALUE


@dataclass(frozen=True)
class AttributeConstrained:
    predicates: Tuple[AttributePredicate, ...]
    raw: str = ""

    def describe(self) -> str:
        return self.raw or PREDICATE_SEPARATOR.join(
            f"{p.name}{ATTRIBUTE_VALUE_SEPARATOR}{p.value}" for p in self.predicates
        )


PlacementRule = Union[AllNodes, AttributeConstrained]


def parse_predicates(value: str) -> Tuple[AttributePredicate, ...]:
    """Split ``value`` into ordered attribute predicates.

    A pair that does not split into exactly two parts is logged and dropped;
    the remaining pairs are still returned.
    """
    predicates = []
    for pair in value.split(PREDICATE_SEPARATOR):
        parts = pair.split(ATTRIBUTE_VALUE_SEPARATOR)
        if len(parts) != 2:
            logger.error(
                f"Attribute pair {pair!r} did not split into 2 parts on "
                f"{ATTRIBUTE_VALUE_SEPARATOR!r}; ignoring it"
            )
            continue
        predicates.append(AttributePredicate(name=parts[0], value=parts[1]))
    return tuple(predicates)


def parse_placement_rule(label_value: str) -> PlacementRule:
    if label_value == LABEL_ALL_VALUE:
        return AllNodes()
    return AttributeConstrained(
        predicates=parse_predicates(label_value), raw=label_value
    )
