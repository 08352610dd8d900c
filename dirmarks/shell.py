"""Shell functions that turn `dirmarks to NAME` into an actual `cd`.

A child process cannot change its parent's working directory, so `to`
only prints the resolved path; the wrapper below runs in the user's shell
and does the `cd` itself. Install with e.g.::

    eval "$(dirmarks shell-init bash)"
"""

from __future__ import annotations

from typing import Dict

SHELLS = ("bash", "zsh", "fish")

_POSIX = """\
{func}() {{
    if [ "$1" = "to" ] && [ $# -ge 2 ]; then
        local target
        target="$(command {prog} to "$2")" || return $?
        cd -- "$target"
    else
        command {prog} "$@"
    fi
}}
"""

_FISH = """\
function {func}
    if test (count $argv) -ge 2; and test "$argv[1]" = "to"
        set -l target (command {prog} to $argv[2]); or return $status
        cd -- $target
    else
        command {prog} $argv
    end
end
"""

_TEMPLATES: Dict[str, str] = {"bash": _POSIX, "zsh": _POSIX, "fish": _FISH}


def shell_init(shell: str, *, func: str = "dm", prog: str = "dirmarks") -> str:
    try:
        template = _TEMPLATES[shell]
    except KeyError:
        raise ValueError(f"Unsupported shell: {shell} (choose from {', '.join(SHELLS)})") from None
    return template.format(func=func, prog=prog)
