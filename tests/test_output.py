"""Tests for console formatting."""

from racesim.output import ConsoleOutput
from racesim.output.console import format_gap
from racesim.simulation import RaceEngine


def test_format_gap():
    assert format_gap(1.5) == "+1.500s"
    assert format_gap(75.25) == "+1:15.25"


def test_prints_standings_and_results(make_config, capsys):
    engine = RaceEngine()
    engine.initialize(make_config(total_laps=1))
    engine.start()
    engine.advance(15500)

    ConsoleOutput.print_standings(engine.get_state())
    ConsoleOutput.print_race_results(engine.results())
    out = capsys.readouterr().out

    assert "Bristol Motor Speedway" in out
    assert "RACE RESULTS" in out
    assert "Denny Hamlin" in out
    assert "*Kyle Busch" in out


def test_prints_decision_and_outcome(make_config, always_pit, capsys):
    engine = RaceEngine()
    engine.initialize(make_config(decisions=always_pit))
    engine.start()
    decision = None
    while decision is None:
        decision = engine.advance(1000)

    ConsoleOutput.print_decision(decision)
    ConsoleOutput.print_outcome(engine.expire_decision())
    out = capsys.readouterr().out

    assert "Pit window is open" in out
    assert "[default]" in out
    assert "NEUTRAL" in out
