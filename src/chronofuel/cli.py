"""
chronofuel/cli.py

Command-line interface.

Usage:
    chronofuel show-config
    chronofuel simulate --participants 10 --days 7 --seed 42
    chronofuel simulate --days 2 --burn 100 --metrics
"""

import json
import logging

import click

from .clock import ManualClock
from .config import SCALE, EmissionConfig, configure_logging
from .errors import ValidationError
from .economics.tiers import FixedEntropySource, SystemEntropySource
from .metrics import EmissionMetrics
from .system import build_system

logger = logging.getLogger("chronofuel.cli")

SIMULATION_START = 1_700_000_000


def load_config() -> EmissionConfig:
    """Effective configuration, with bad CHRONOFUEL_* values reported as usage errors."""
    try:
        return EmissionConfig.from_env()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}")


@click.group()
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='WARNING',
    help='Logging level',
)
def main(log_level):
    """ChronoFuel token-emission engine tools."""
    configure_logging(log_level)


@main.command('show-config')
def show_config():
    """Print the effective configuration (CHRONOFUEL_* overrides applied)."""
    config = load_config()
    click.echo(json.dumps(config.to_dict(), indent=2))


@main.command()
@click.option('--participants', default=5, show_default=True, type=click.IntRange(1, None),
              help='Number of simulated participants')
@click.option('--days', default=3, show_default=True, type=click.IntRange(1, None),
              help='Simulated days')
@click.option('--stake', 'stake_tokens', default=100, show_default=True, type=click.IntRange(1, None),
              help='Tokens staked per participant')
@click.option('--burn', 'burn_tokens', default=0, show_default=True, type=click.IntRange(0, None),
              help='Tokens each participant burns for boost before staking')
@click.option('--step', default=3600, show_default=True, type=click.IntRange(1, None),
              help='Simulation step in seconds')
@click.option('--seed', default=None, type=int,
              help='Deterministic entropy seed (omit for OS entropy)')
@click.option('--metrics', 'show_metrics', is_flag=True,
              help='Also print Prometheus metrics')
def simulate(participants, days, stake_tokens, burn_tokens, step, seed, show_metrics):
    """Run participants through stake/claim cycles on a simulated clock."""
    clock = ManualClock(SIMULATION_START)
    entropy = FixedEntropySource(seed) if seed is not None else SystemEntropySource()
    system = build_system(config=load_config(), clock=clock, entropy=entropy)
    engine = system.engine
    metrics = EmissionMetrics(engine, system.halving)

    names = [f"participant-{i + 1}" for i in range(participants)]
    per_participant = (stake_tokens + burn_tokens) * SCALE
    for name in names:
        system.ledger.transfer(system.owner, name, per_participant)
        system.ledger.approve(name, engine.address, per_participant)
        if burn_tokens:
            engine.boost_burn(name, burn_tokens * SCALE)
        engine.stake(name, stake_tokens * SCALE)

    end = SIMULATION_START + days * 86400
    halvings = 0
    next_day = SIMULATION_START + 86400
    while clock.now < end:
        clock.advance(step)
        for name in names:
            if clock.now >= engine.next_claim_at(name):
                engine.claim_reward(name)
        if clock.now >= next_day:
            if engine.check_halving():
                halvings += 1
            next_day += 86400

    summary = metrics.get_stats()
    summary["halvings_applied"] = halvings
    summary["balances"] = {name: system.ledger.balance_of(name) for name in names}
    summary["certificates"] = len(system.certificates)
    click.echo(json.dumps(summary, indent=2, default=str))

    if show_metrics:
        click.echo(metrics.collect())


if __name__ == '__main__':
    main()
