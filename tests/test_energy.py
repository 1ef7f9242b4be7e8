from __future__ import annotations

from datetime import timedelta

import pytest

from services.energy import regen_energy, spend_energy
from services.errors import InsufficientEnergy


def test_regen_whole_intervals_only(make_player, clock):
    player = make_player(energy=5, energy_regen_at=clock() - timedelta(minutes=65))

    assert regen_energy(player, clock()) == 2
    assert player.energy == 7
    # 5 хвилин неповного інтервалу не губляться
    assert player.energy_regen_at == clock() - timedelta(minutes=5)


def test_regen_caps_at_max(make_player, clock):
    player = make_player(energy=9, energy_regen_at=clock() - timedelta(hours=3))

    assert regen_energy(player, clock()) == 1
    assert player.energy == 10
    assert player.energy_regen_at == clock()


def test_regen_noop_before_interval(make_player, clock):
    player = make_player(energy=3, energy_regen_at=clock() - timedelta(minutes=29))

    assert regen_energy(player, clock()) == 0
    assert player.energy == 3


def test_spend_from_full_starts_regen_clock(make_player, clock):
    player = make_player(energy=10, energy_regen_at=clock() - timedelta(days=1))

    assert spend_energy(player, 1, clock()) == (9, 10)
    assert player.energy_regen_at == clock()


def test_spend_without_energy(make_player, clock):
    player = make_player(energy=0)

    with pytest.raises(InsufficientEnergy):
        spend_energy(player, 1, clock())
    assert player.energy == 0
