"""Actor tiers derived from identity roles."""

import pytest

from acadlab.core.enums import ActorTier, RoleName
from acadlab.principal import Actor


@pytest.mark.parametrize(
    "role,tier",
    [
        (RoleName.ADMIN, ActorTier.MANAGER),
        (RoleName.TECHNICIAN, ActorTier.MANAGER),
        (RoleName.PROFESSOR, ActorTier.BASE),
    ],
)
def test_tier_for_role(role, tier):
    actor = Actor("01HX0000000000000000000000", role)
    assert actor.tier == tier
    assert actor.is_manager == (tier == ActorTier.MANAGER)


def test_from_role_name_is_case_insensitive():
    assert Actor.from_role_name("u1", "technician") == Actor("u1", RoleName.TECHNICIAN)


def test_unknown_role_rejected():
    with pytest.raises(ValueError):
        Actor.from_role_name("u1", "student")
