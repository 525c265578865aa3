from roomsync.domain.reactions import ReactionOutcome, classify_reaction


def test_star_reactions():
    assert classify_reaction("\U0001F49C") is ReactionOutcome.STAR_VOTE
    assert classify_reaction("\u2B50\uFE0F") is ReactionOutcome.STAR_VOTE


def test_everything_else_is_ignored():
    for symbol in ["\U0001F600", "\U0001F3B5", "\U0001F44D", "\U0001F31F", "\u2764\uFE0F", "\U0001F499", "\u2B50", "", None, 5]:
        assert classify_reaction(symbol) is ReactionOutcome.IGNORED
