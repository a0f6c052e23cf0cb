# flyos

An interactive command shell for network appliances. It gathers executable
programs from configured directories, describes them from a TOML catalogue,
and provides route types that can be validated, turned into command-line
arguments and applied through external helper programs.

## Installing

```
pip install .
```

## Running the shell

```
flyos
```

At start-up the shell reads `~/.flyos/config.toml` (or `$FLYOS_HOME/.flyos/config.toml`
when `FLYOS_HOME` is set; the current directory is used if no home directory
can be found). If the configuration cannot be read, the shell prints the error
and exits with status 1. The command catalogue `desc.toml` is read from the
same directory; a missing or malformed catalogue is ignored. Both files are
watched, and writes to them are picked up, after a short delay, while the
shell runs.

A configuration looks like this:

```toml
commands_dirs = ["/opt/flyos/bin"]
excludes = ["README"]

[env]
LANG = "C"
PATH = ["/usr/local/bin", "/usr/bin"]   # lists of strings are joined with ":"
```

Every regular file under `commands_dirs` that is executable, or that starts
with `#!`, becomes a command named after the file, unless its name is listed in
`excludes`. The variables in `[env]`, together with `USER=fly` and
`VERSION=1.0.0`, are appended to the shell's own environment when commands run.

The catalogue groups command descriptions by category. Any table holding a
`desc` key describes a command; the first part of its path is the category
and the rest, joined with dots, is the command name:

```toml
[network.show_routes]
desc = "Show the routing table"
usage = "show_routes [TABLE]"
args = ["TABLE  optional table name"]
returns = ["one route per line"]
```

Built-in commands:

- `help [COMMAND|CATEGORY|KEYWORD]`: help for a command or category, or a keyword search through the catalogue
- `list`: every command, grouped by category
- `env [VAR...]`: print the environment passed to commands
- `exit`: leave the shell (end of input or Ctrl-C also leaves it)

Any other word runs the external command of that name with the rest of the
line as its arguments. When the shell is used from a terminal, line history is
kept in `/tmp/flyos_history`.

The pieces of the shell can also be used from Python: `flyos.config`
(`Config`, `parse_config`, `merge_env`, `flyos_home`), `flyos.desc`
(`CommandDesc`, `DescManager`), `flyos.commands` (`FileCommand` and the
built-in commands) and `flyos.shell` (`Shell`, `is_executable`).

## Routes

```python
from flyos.routing.routes import StaticRoute

route = StaticRoute(prefix="10.0.0.0/24", via="192.168.1.1", dev="eth0", track=True)
route.validate()
print(route.to_args())
# ['--ip', '10.0.0.0', '--netmask', '255.255.255.0', '--nexthop', '192.168.1.1',
#  '--interface', 'eth0', '--track', 'true']
```

`flyos.routing.routes` has `StaticRoute`, `BGPRoute`, `OSPFRoute` and
`PBRRule`. `validate()` raises a `RouteError` subclass (`MissingFieldError`,
`InvalidCIDRError`, `InvalidIPv4Error`, `MissingViaOrDevError`) for bad
input; a bare address given as the prefix is turned into a `/32`.
`to_dict()` and `from_dict()` convert routes to and from JSON-ready mappings,
and `parse_community()` reads BGP communities written as `A:B` or as a number.

`flyos.routing.registry` creates routes by protocol name
(`new_route_by_proto("bgp")`) and gives each route a key with `route_key()`.

`flyos.routing.manager.CLIManager` applies routes by running the
`<op>_ipv4_<proto>_route` helper programs found on `PATH`: `add`, `set` and
`remove` pass the route's arguments, `list` reads JSON arrays from the `list`
helpers, and `sync` feeds each protocol's routes as JSON to its `sync` helper.
Failures are raised as `RouteCommandError`.

## What is not included

The package does not include a parser or executor for a text configuration
language, and although `flyos.module` defines interfaces for modules, events
and module objects, it ships no runtime that loads, runs or dispatches to such
modules. Routes are applied only through `CLIManager` and the external helper
programs, which are not part of this package.

## Tests

```
pip install .[test]
pytest
```