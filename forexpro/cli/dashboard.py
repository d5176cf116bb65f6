"""CLI dashboard — prints analysis and simulation summaries to the console."""


def _fmt(value, digits: int = 5) -> str:
    return f"{value:.{digits}f}" if value is not None else "N/A"


def print_analysis(analysis: dict) -> str:
    """Format and print an analysis result.

    Args:
        analysis: Dict produced by ``AnalysisResult.to_dict``.

    Returns:
        The formatted string (also printed to stdout).
    """
    signal = analysis.get("signal", {})
    setup = analysis.get("setup", {})
    indicators = signal.get("indicators", {})

    lines = [
        "──────────────── ForexPro Analysis ────────────────",
        f"  Pair:            {analysis.get('pair', 'N/A')} ({analysis.get('timeframe', '')})",
        f"  Price:           {_fmt(analysis.get('price'))}",
        f"  Signal:          {signal.get('signal', 'N/A')} ({signal.get('confidence', 0)}%)",
        f"  RSI:             {_fmt(indicators.get('rsi'), 1)}",
        f"  ATR:             {_fmt(analysis.get('atr'))}",
    ]
    for reason in signal.get("reasons", []):
        lines.append(f"    - {reason}")

    if setup.get("active"):
        quality = setup.get("quality", {})
        lines += [
            f"  Setup:           {setup['direction']} @ {_fmt(setup['entry'])}",
            f"  Stop / Target:   {_fmt(setup['stop_loss'])} / {_fmt(setup['take_profit'])}",
            f"  Risk:Reward:     1:{setup['risk_reward']}",
            f"  Probability:     {setup['probability']}% "
            f"[{quality.get('rating', '?')}] {quality.get('label', '')}".rstrip(),
        ]
    else:
        lines += [
            f"  Setup:           {setup.get('message', 'N/A')}",
            f"  Suggestion:      {setup.get('suggestion', '')}",
        ]
    lines.append("──────────────────────────────────────────────────")

    output = "\n".join(lines)
    print(output)
    return output


def print_simulation(trade: dict) -> str:
    """Format and print a simulated trade record."""
    outcome = "WIN" if trade.get("is_win") else "LOSS"
    lines = [
        f"  Simulated {trade['direction']} {trade['pair']}: {outcome} "
        f"{trade['pnl_pips']:+.1f} pips (p={trade['probability']}%)",
        f"  Entry {_fmt(trade['entry_price'])} → Exit {_fmt(trade['exit_price'])}",
    ]
    output = "\n".join(lines)
    print(output)
    return output
