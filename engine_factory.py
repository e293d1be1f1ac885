from ban_list import BanList
from ban_rule import BanFunctionRule
from rule_engine import RuleEngine


def build_engine(ban_pairs=None):
    """
    Build an engine for one file. Every call gets a fresh BanList,
    so files never share rule state.
    """
    ban_list = BanList.from_pairs(ban_pairs or [])
    return RuleEngine([BanFunctionRule(ban_list)])
