"""Terminal: translate typed command lines into repository operations."""

import difflib
import logging
import shlex
from typing import Callable

from .course import describe, find_module, outline
from .graph import layout, render
from .repository import ALL, OpResult, Reason, Repository

logger = logging.getLogger(__name__)

WELCOME = "Welcome to Git Learn! Type 'git init' to start."

CLEAR = "\x0c"
"""Sentinel line asking the front end to clear its scrollback."""

GIT_COMMANDS = (
    "add",
    "branch",
    "checkout",
    "commit",
    "init",
    "log",
    "merge",
    "status",
    "switch",
)

UNSUPPORTED = (
    "cherry-pick",
    "clone",
    "config",
    "diff",
    "fetch",
    "mv",
    "pull",
    "push",
    "rebase",
    "remote",
    "reset",
    "restore",
    "revert",
    "rm",
    "show",
    "stash",
    "tag",
)

REASON_MESSAGES = {
    Reason.NOT_INITIALIZED: "fatal: not a git repository (or any of the parent directories): .git",
    Reason.NOTHING_TO_COMMIT: "nothing to commit, working tree clean",
    Reason.NO_COMMITS: "fatal: your current branch '{branch}' does not have any commits yet",
    Reason.ALREADY_EXISTS: "fatal: a branch named '{name}' already exists",
    Reason.INVALID_NAME: "fatal: '{name}' is not a valid branch name",
    Reason.NO_SUCH_BRANCH: "merge: {name} - not something we can merge",
    Reason.NO_SUCH_TARGET: "error: pathspec '{name}' did not match any file(s) known to git",
    Reason.SELF_MERGE: "fatal: cannot merge '{name}' into itself",
    Reason.UP_TO_DATE: "Already up to date.",
    Reason.DETACHED_HEAD: "fatal: HEAD is detached; check out a branch before merging",
    Reason.NO_PATHS: "Nothing specified, nothing added.",
}

HELP = [
    "Shell commands:",
    "  touch <file>...            create or modify files",
    "  reset                      wipe the sandbox",
    "  clear                      clear the screen",
    "  help                       show this help",
    "  guide [<module>]           git reference: modules, topics, commands",
    "Git commands:",
    "  git init                   create an empty repository",
    "  git status                 show staged and untracked files",
    "  git add <file>... | .      stage files",
    "  git commit [-a] -m <msg>   record staged files",
    "  git branch [<name>]        list or create branches",
    "  git checkout [-b] <target> switch branches or detach at a commit",
    "  git switch [-c] <branch>   switch branches",
    "  git merge <branch>         merge a branch into the current one",
    "  git log [--graph] [<ref>]  show history",
]


class Terminal:
    """Line-oriented front end for a ``Repository``.

    ``run()`` takes one line of user input and returns the lines a
    terminal would print in response. It never raises for bad input.
    """

    def __init__(self, repository: Repository | None = None) -> None:
        self.repository = repository if repository is not None else Repository()
        self._git_handlers: dict[str, Callable[[list[str]], list[str]]] = {
            "add": self._add,
            "branch": self._branch,
            "checkout": self._checkout,
            "commit": self._commit,
            "init": self._init,
            "log": self._log,
            "merge": self._merge,
            "status": self._status,
            "switch": self._switch,
        }

    def run(self, line: str) -> list[str]:
        try:
            argv = shlex.split(line)
        except ValueError as exc:
            return [f"bash: syntax error: {exc}"]
        if not argv:
            return []

        command, args = argv[0], argv[1:]
        logger.debug("command %s %s", command, args)
        if command == "git":
            return self._git(args)
        if command == "touch":
            return self._touch(args)
        if command == "reset":
            self.repository.reset()
            return ["Sandbox reset. Type 'git init' to start again."]
        if command == "help":
            return list(HELP)
        if command == "clear":
            return [CLEAR]
        if command == "guide":
            return self._guide(args)
        return [f"bash: {command}: command not found"]

    # -- Dispatch --

    def _git(self, args: list[str]) -> list[str]:
        if not args or args[0] in ("help", "--help", "-h"):
            return list(HELP)
        sub, rest = args[0], args[1:]
        if sub == "--version":
            return ["git version 2.43.0 (gitlearn sandbox)"]
        handler = self._git_handlers.get(sub)
        if handler is not None:
            return handler(rest)
        if sub in UNSUPPORTED:
            return [f"git {sub}: not supported in this sandbox"]

        lines = [f"git: '{sub}' is not a git command. See 'git --help'."]
        matches = difflib.get_close_matches(sub, GIT_COMMANDS, n=1)
        if matches:
            lines += ["", "The most similar command is", f"\t{matches[0]}"]
        return lines

    def _fail(self, result: OpResult, name: str = "") -> list[str]:
        if result.reason is None:
            return []
        branch = self.repository.current_branch or "HEAD"
        return [REASON_MESSAGES[result.reason].format(name=name, branch=branch)]

    # -- Shell commands --

    def _touch(self, args: list[str]) -> list[str]:
        if not args:
            return ["usage: touch <filename>"]
        for name in args:
            result = self.repository.touch(name)
            if not result:
                return ["touch: no repository here yet; run 'git init' first"]
        return []

    def _guide(self, args: list[str]) -> list[str]:
        if not args:
            return outline()
        query = " ".join(args)
        module = find_module(query)
        if module is None:
            return [f"guide: no module named '{query}'", *outline()]
        return describe(module)

    # -- Git commands --

    def _init(self, args: list[str]) -> list[str]:
        existed = self.repository.initialized
        self.repository.initialize()
        if existed:
            return ["Reinitialized existing Git repository"]
        return ["Initialized empty Git repository"]

    def _add(self, args: list[str]) -> list[str]:
        paths = [ALL if arg in ("-A", "--all") else arg for arg in args]
        result = self.repository.stage(*paths)
        return [] if result else self._fail(result)

    def _commit(self, args: list[str]) -> list[str]:
        stage_all = False
        message_at = None
        for i, arg in enumerate(args):
            if arg in ("-m", "--message"):
                message_at = i + 1
                break
            if arg in ("-a", "--all"):
                stage_all = True
            elif arg[:1] == "-" and arg[1:2] != "-" and set(arg[1:]) <= {"a", "m"}:
                # Bundled short flags such as -am.
                stage_all = stage_all or "a" in arg
                if arg.endswith("m"):
                    message_at = i + 1
                    break
        if message_at is None or message_at >= len(args):
            return ["usage: git commit [-a] -m <message>"]
        message = " ".join(args[message_at:])

        if stage_all:
            self.repository.stage(ALL)
        result = self.repository.commit(message)
        if not result:
            return self._fail(result)
        commit = self.repository.get_commit(result.commit)
        where = self.repository.current_branch or "detached HEAD"
        if commit is not None and commit.is_root:
            where += " (root-commit)"
        return [f"[{where} {result.commit}] {message}"]

    def _branch(self, args: list[str]) -> list[str]:
        if args and args[0].startswith("-"):
            return [f"error: unknown switch '{args[0].lstrip('-')}'"]
        if args:
            result = self.repository.create_branch(args[0])
            return [] if result else self._fail(result, args[0])

        status = self.repository.status()
        if not status.initialized:
            return [REASON_MESSAGES[Reason.NOT_INITIALIZED]]
        lines = []
        if status.detached:
            lines.append(f"* (HEAD detached at {status.head})")
        for name, tip in self.repository.branches().items():
            if tip is None:
                continue
            lines.append(f"* {name}" if name == status.branch else f"  {name}")
        return lines

    def _checkout(self, args: list[str]) -> list[str]:
        if args and args[0] == "-b":
            if len(args) < 2:
                return ["error: switch 'b' requires a value"]
            return self._switch_new(args[1])
        if not args:
            return ["usage: git checkout <branch>"]

        target = args[0]
        before = self.repository.current_branch
        result = self.repository.checkout(target)
        if not result:
            return self._fail(result, target)
        if self.repository.current_branch is None:
            commit = self.repository.get_commit(target)
            message = commit.message if commit is not None else ""
            return [
                f"Note: switching to '{target}'.",
                "",
                "You are in 'detached HEAD' state. Commits you make here",
                "belong to no branch unless you create one with git checkout -b.",
                "",
                f"HEAD is now at {target} {message}".rstrip(),
            ]
        if before == target:
            return [f"Already on '{target}'"]
        return [f"Switched to branch '{target}'"]

    def _switch(self, args: list[str]) -> list[str]:
        if args and args[0] in ("-c", "--create"):
            if len(args) < 2:
                return [f"error: switch '{args[0].lstrip('-')[0]}' requires a value"]
            return self._switch_new(args[1])
        if not args:
            return ["usage: git switch <branch>"]
        if args[0] not in self.repository.branches():
            if not self.repository.initialized:
                return [REASON_MESSAGES[Reason.NOT_INITIALIZED]]
            return [f"fatal: invalid reference: {args[0]}"]
        return self._checkout(args[:1])

    def _switch_new(self, name: str) -> list[str]:
        result = self.repository.checkout(name, create=True)
        if not result:
            return self._fail(result, name)
        return [f"Switched to a new branch '{name}'"]

    def _merge(self, args: list[str]) -> list[str]:
        # Every merge already records a merge commit.
        args = [a for a in args if a != "--no-ff"]
        if args and args[0].startswith("-"):
            return [f"error: unknown option '{args[0].lstrip('-')}'"]
        if not args:
            return ["usage: git merge <branch>"]
        result = self.repository.merge(args[0])
        if not result:
            return self._fail(result, args[0])
        return ["Merge made by the 'ort' strategy."]

    def _status(self, args: list[str]) -> list[str]:
        status = self.repository.status()
        if not status.initialized:
            return [REASON_MESSAGES[Reason.NOT_INITIALIZED]]

        if status.detached:
            lines = [f"HEAD detached at {status.head}"]
        else:
            lines = [f"On branch {status.branch}"]
        if status.head is None:
            lines += ["", "No commits yet"]
        if status.staged:
            lines += ["", "Changes to be committed:"]
            lines += [f"\tnew file:   {path}" for path in status.staged]
        if status.unstaged:
            lines += ["", "Untracked files:"]
            lines += [f"\t{path}" for path in status.unstaged]
        if not status.staged and not status.unstaged:
            lines += ["", "nothing to commit, working tree clean"]
        return lines

    def _log(self, args: list[str]) -> list[str]:
        if not self.repository.initialized:
            return [REASON_MESSAGES[Reason.NOT_INITIALIZED]]
        graph = "--graph" in args
        refs = [a for a in args if not a.startswith("-")]
        commits = self.repository.log()
        if not commits:
            return [REASON_MESSAGES[Reason.NO_COMMITS].format(
                branch=self.repository.current_branch or "HEAD"
            )]

        if refs:
            if self.repository.resolve(refs[0]) is None:
                return [
                    f"fatal: ambiguous argument '{refs[0]}': unknown revision"
                ]
            reachable = set(self.repository.history(refs[0], all_parents=True))
            commits = [c for c in commits if c.id in reachable]

        if graph:
            status = self.repository.status()
            nodes = layout(
                commits, self.repository.branches(), status.head, status.branch
            )
            return render(nodes)
        return [f"* {c.id} - {c.message}" for c in reversed(commits)]
