"""Console output formatting."""

from racesim.decisions import Decision, DecisionOutcome
from racesim.simulation.race import RaceResult, RaceSnapshot


def format_gap(gap: float) -> str:
    """Format a time gap as +s.sss, or +m:ss.ss beyond a minute."""
    if gap < 60:
        return f"+{gap:.3f}s"
    mins = int(gap // 60)
    secs = gap % 60
    return f"+{mins}:{secs:05.2f}"


class ConsoleOutput:
    """Formats race state and results for console display."""

    @staticmethod
    def print_standings(snapshot: RaceSnapshot) -> None:
        """Print the running order.

        Args:
            snapshot: Current race snapshot
        """
        print("\n" + "=" * 60)
        print(f"LAP {snapshot.current_lap}/{snapshot.total_laps} - {snapshot.track.name}")
        print("=" * 60)
        print(f"{'Pos':<4} {'Driver':<20} {'Lap':<6} {'Gap':<12} {'Last lap':<10}")
        print("-" * 60)

        for standing in snapshot.positions:
            marker = "*" if standing.driver_id == snapshot.player_id else " "
            gap = "Leader" if standing.position == 1 else format_gap(standing.gap_to_leader)
            last = f"{standing.last_lap_time:.3f}" if standing.last_lap_time > 0 else "-"
            print(
                f"{standing.position:<4}"
                f"{marker}{standing.driver_name:<19} "
                f"{standing.current_lap:<6} "
                f"{gap:<12} "
                f"{last:<10}"
            )

        print("=" * 60)

    @staticmethod
    def print_decision(decision: Decision) -> None:
        """Print a decision prompt and its options."""
        print("\n" + "-" * 60)
        print(f"DECISION ({decision.time_limit:.0f}s): {decision.prompt}")
        for index, option in enumerate(decision.options, 1):
            default = " [default]" if option.id == decision.default_option else ""
            print(f"  {index}. {option.label} ({option.risk_level.value} risk){default}")
            if option.description:
                print(f"     {option.description}")
        print("-" * 60)

    @staticmethod
    def print_outcome(outcome: DecisionOutcome) -> None:
        """Print how a decision played out."""
        roll = f"{outcome.roll:.1f}" if outcome.roll is not None else "-"
        print(
            f"  -> {outcome.result.value.upper()} "
            f"(chance {outcome.success_chance:.0f}%, roll {roll}): {outcome.summary}"
        )

    @staticmethod
    def print_race_results(results: list[RaceResult]) -> None:
        """Print race results to console.

        Args:
            results: Race results sorted by position
        """
        print("\n" + "=" * 76)
        print("RACE RESULTS")
        print("=" * 76)
        print(
            f"{'Pos':<4} {'Driver':<20} {'Time/Gap':<14} {'Start':<6} "
            f"{'+/-':<5} {'Led':<5} {'Best lap':<10}"
        )
        print("-" * 76)

        leader_time = None
        for result in sorted(results, key=lambda r: r.position):
            if leader_time is None:
                leader_time = result.total_time
                time_str = f"{result.total_time:.3f}s"
            else:
                time_str = format_gap(result.total_time - leader_time)

            marker = "*" if result.is_player else " "
            gained = f"{result.positions_gained:+d}"
            print(
                f"{result.position:<4}"
                f"{marker}{result.driver_name:<19} "
                f"{time_str:<14} "
                f"{result.start_position:<6} "
                f"{gained:<5} "
                f"{result.laps_led:<5} "
                f"{result.fastest_lap:.3f}"
            )

        player = next((r for r in results if r.is_player), None)
        if player is not None:
            print("-" * 76)
            print(
                f"Decisions: {player.decisions_successful}/{player.decisions_made} successful"
            )
            if player.xp_earned:
                xp = ", ".join(f"{skill} +{amount:.0f}" for skill, amount in sorted(player.xp_earned.items()))
                print(f"XP earned: {xp}")

        print("=" * 76)
