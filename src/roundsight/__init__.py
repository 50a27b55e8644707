"""
RoundSight - Advanced round statistics for tactical team shooters

Derives per-player advanced statistics for one round from the decoded
match feed: entry duels, trade kills, multi-kills, clutches, objective
play and KOST.

Usage:
    from roundsight import analyze, parse_events, parse_roster, parse_base_stats

    stats = analyze(
        parse_roster(header["players"]),
        parse_base_stats(player_stats),
        parse_events(match_feedback),
    )

    for username, player in stats.items():
        print(f"{username}: KOST={player.kost} trades={player.trade_kills}")
"""

__version__ = "0.1.0"
__author__ = "RoundSight Contributors"


def __getattr__(name):
    """Lazy import so the engine loads without pandas."""
    if name == "analyze":
        from roundsight.domains.combat import analyze
        return analyze
    elif name == "analyze_round":
        from roundsight.domains.combat import analyze_round
        return analyze_round
    elif name == "RoundAnalyzer":
        from roundsight.domains.combat import RoundAnalyzer
        return RoundAnalyzer
    elif name == "parse_events":
        from roundsight.core.feed import parse_events
        return parse_events
    elif name == "parse_roster":
        from roundsight.core.feed import parse_roster
        return parse_roster
    elif name == "parse_base_stats":
        from roundsight.core.feed import parse_base_stats
        return parse_base_stats
    elif name == "round_stats_frame":
        from roundsight.analysis.aggregate import round_stats_frame
        return round_stats_frame
    elif name == "export_analysis":
        from roundsight.export import export_analysis
        return export_analysis
    raise AttributeError(f"module 'roundsight' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Engine
    "analyze",
    "analyze_round",
    "RoundAnalyzer",
    # Feed
    "parse_events",
    "parse_roster",
    "parse_base_stats",
    # Aggregation / export
    "round_stats_frame",
    "export_analysis",
]
