"""
NAT and forwarding rules for the Wi-Fi router controller
"""
import os
import shlex
import ipaddress
from .utils import log, warn, warn_continue, run_command, command_exists

OPTION_ALIASES = {
    '--in-interface': '-i',
    '--out-interface': '-o',
    '--jump': '-j',
    '--match': '-m',
    '--source': '-s',
    '--src': '-s',
    '--destination': '-d',
    '--dst': '-d',
    '--protocol': '-p',
    '--ctstate': '--state',
}

# iptables-nft lists "-m state" rules as conntrack matches
MATCH_ALIASES = {
    'conntrack': 'state',
}

ADDRESS_OPTIONS = ('-s', '-d')


def _is_option(token):
    return token.startswith('-') and len(token) > 1 and not token[1].isdigit()


def _normalize_value(option, value):
    bare = option.lstrip('!')
    if bare == '-m':
        return MATCH_ALIASES.get(value, value)
    if bare == '--state':
        return ','.join(sorted(value.upper().split(',')))
    if bare in ADDRESS_OPTIONS:
        try:
            return str(ipaddress.ip_network(value, strict=False))
        except ValueError:
            return value
    return value


def normalize_args(args):
    """
    Reduce a rule specification to a canonical, order-independent form.
    Returns a sorted tuple of (option, values) pairs.
    """
    pairs = []
    option = None
    values = []
    negate = False

    def flush():
        if option is not None:
            pairs.append((option, tuple(_normalize_value(option, v) for v in values)))

    for token in args:
        if token == '!':
            negate = True
        elif _is_option(token):
            flush()
            option = OPTION_ALIASES.get(token, token)
            if negate:
                option = '!' + option
                negate = False
            values = []
        else:
            if negate and option is not None and not option.startswith('!'):
                option = '!' + option
                negate = False
            values.append(token)
    flush()

    return tuple(sorted(pairs))


class Rule(object):
    """A rule in one chain of one iptables table, compared by meaning rather than text."""

    def __init__(self, table, chain, args):
        self.table = table
        self.chain = chain
        self.args = tuple(args)

    def key(self):
        return (self.table, self.chain, normalize_args(self.args))

    def command(self, action):
        return ["iptables", "-t", self.table, action, self.chain] + list(self.args)

    def __eq__(self, other):
        if not isinstance(other, Rule):
            return NotImplemented
        return self.key() == other.key()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self.key())

    def __repr__(self):
        return f"Rule({self.table!r}, {self.chain!r}, {' '.join(self.args)!r})"

    def __str__(self):
        return f"-t {self.table} -A {self.chain} {' '.join(self.args)}"


def parse_rule_listing(output, table):
    """
    Parse 'iptables -S' output.
    Returns (policies, rules): chain policies by chain name, rules in table order.
    """
    policies = {}
    rules = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        tokens = shlex.split(line)
        if tokens[0] == '-P' and len(tokens) >= 3:
            policies[tokens[1]] = tokens[2]
        elif tokens[0] == '-A' and len(tokens) >= 2:
            rules.append(Rule(table, tokens[1], tokens[2:]))
    return policies, rules


def _list_chain(table, chain):
    result = run_command(["iptables", "-t", table, "-S", chain], silent=True)
    if result.returncode != 0:
        return None
    return parse_rule_listing(result.stdout or "", table)


def list_rules(table, chain):
    """Return the rules of a chain in order, or None if the table cannot be listed."""
    listing = _list_chain(table, chain)
    if listing is None:
        return None
    return listing[1]


def chain_policy(table, chain):
    listing = _list_chain(table, chain)
    if listing is None:
        return None
    return listing[0].get(chain)


def rule_exists(rule):
    """
    Look the rule up in the listed chain.
    Falls back to 'iptables -C' when the chain cannot be listed.
    """
    rules = list_rules(rule.table, rule.chain)
    if rules is not None:
        return rule in rules
    result = run_command(rule.command("-C"), silent=True)
    return result.returncode == 0


def add_rule(rule):
    """Append the rule unless an equivalent one is present. Returns True if added."""
    if rule_exists(rule):
        log(f"Rule already present: {rule}")
        return False
    result = run_command(rule.command("-A"), silent=True)
    if result.returncode != 0:
        warn(f"Failed to add rule: {rule}")
        return False
    log(f"Rule added: {rule}")
    return True


def delete_rule(rule):
    """Delete the rule if present. Returns True if removed."""
    if not rule_exists(rule):
        return False
    result = run_command(rule.command("-D"), silent=True)
    if result.returncode != 0:
        warn(f"Failed to delete rule: {rule}")
        return False
    log(f"Rule removed: {rule}")
    return True


def router_rules(config):
    """The NAT masquerade rule and the two forwarding rules the router needs."""
    eth_if = config['ETH_IF']
    wifi_if = config['WIFI_IF']
    return [
        Rule("nat", "POSTROUTING", ["-o", eth_if, "-j", "MASQUERADE"]),
        Rule("filter", "FORWARD", ["-i", eth_if, "-o", wifi_if,
                                   "-m", "state", "--state", "RELATED,ESTABLISHED", "-j", "ACCEPT"]),
        Rule("filter", "FORWARD", ["-i", wifi_if, "-o", eth_if, "-j", "ACCEPT"]),
    ]


def setup_firewall(config):
    """Install NAT and forwarding rules without duplicating them."""
    log("Configuring NAT (iptables)...")
    for rule in router_rules(config):
        add_rule(rule)


def remove_firewall(config):
    log("Removing NAT and forwarding rules...")
    for rule in router_rules(config):
        delete_rule(rule)


def open_forward_policy():
    """
    Switch a DROP policy on the FORWARD chain to ACCEPT so routed traffic passes.
    Returns the policy found before the change.
    """
    policy = chain_policy("filter", "FORWARD")
    if policy == "DROP":
        warn("FORWARD policy is DROP; setting it to ACCEPT so traffic can be routed.")
        result = run_command(["iptables", "-P", "FORWARD", "ACCEPT"], silent=True)
        if result.returncode != 0:
            warn_continue("Failed to change the FORWARD policy")
    return policy


def reset_forward_policy():
    log("Setting FORWARD policy back to DROP")
    result = run_command(["iptables", "-P", "FORWARD", "DROP"], silent=True)
    if result.returncode != 0:
        warn_continue("Failed to change the FORWARD policy")


def save_firewall_rules():
    """Save firewall rules to make them persistent after reboot, if a helper is installed."""
    if command_exists("netfilter-persistent"):
        result = run_command(["netfilter-persistent", "save"], silent=True)
        if result.returncode != 0:
            warn("netfilter-persistent failed to save the rules")
        return result.returncode == 0

    if os.path.exists("/etc/init.d/iptables"):
        result = run_command(["/etc/init.d/iptables", "save"], silent=True)
        if result.returncode != 0:
            warn("/etc/init.d/iptables failed to save the rules")
        return result.returncode == 0

    warn("netfilter-persistent is not installed: install iptables-persistent to keep the rules after reboot.")
    return False


def show_rules():
    print("iptables POSTROUTING (nat):")
    run_command(["iptables", "-t", "nat", "-L", "POSTROUTING", "-n", "-v"])
    print()
    print("iptables FORWARD:")
    run_command(["iptables", "-L", "FORWARD", "-n", "-v"])
