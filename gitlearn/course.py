"""Git reference guide: modules of topics of commands to practice."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Entry:
    command: str
    description: str
    supported: bool = False


@dataclass(frozen=True)
class Topic:
    title: str
    entries: tuple[Entry, ...]


@dataclass(frozen=True)
class Module:
    name: str
    topics: tuple[Topic, ...]


COURSE = (
    Module("Getting Started", (
        Topic("Git Introduction", (
            Entry("git --version", "Check Git version", True),
            Entry('git config --global user.name "Your Name"', "Set your username"),
            Entry('git config --global user.email "you@example.com"', "Set your email"),
        )),
        Topic("Initialize Repository", (
            Entry("git init", "Initialize a new Git repository", True),
            Entry("git status", "Check repository status", True),
        )),
    )),
    Module("Basic Commands", (
        Topic("Staging Files", (
            Entry("git add <file>", "Stage a specific file", True),
            Entry("git add .", "Stage all changes", True),
            Entry("git add -A", "Stage all (including deletions)", True),
        )),
        Topic("Committing", (
            Entry('git commit -m "message"', "Commit with message", True),
            Entry('git commit -am "message"', "Add and commit in one step", True),
            Entry("git log", "View commit history", True),
            Entry("git log --oneline", "Compact commit history", True),
        )),
        Topic("Viewing Changes", (
            Entry("git diff", "Show unstaged changes"),
            Entry("git diff --staged", "Show staged changes"),
            Entry("git show <commit>", "Show commit details"),
        )),
    )),
    Module("Branching", (
        Topic("Branch Basics", (
            Entry("git branch", "List all branches", True),
            Entry("git branch <name>", "Create new branch", True),
            Entry("git branch -d <name>", "Delete branch"),
            Entry("git branch -m <new>", "Rename current branch"),
        )),
        Topic("Switching Branches", (
            Entry("git checkout <branch>", "Switch to branch", True),
            Entry("git checkout -b <name>", "Create and switch", True),
            Entry("git switch <branch>", "Switch (newer syntax)", True),
            Entry("git switch -c <name>", "Create and switch (newer)", True),
        )),
        Topic("Merging", (
            Entry("git merge <branch>", "Merge branch into current", True),
            Entry("git merge --no-ff <branch>", "Merge with commit", True),
            Entry("git merge --abort", "Abort merge"),
        )),
    )),
    Module("Remote Repositories", (
        Topic("Remote Setup", (
            Entry("git remote add origin <url>", "Add remote repository"),
            Entry("git remote -v", "List remotes"),
            Entry("git remote remove <name>", "Remove remote"),
        )),
        Topic("Push & Pull", (
            Entry("git push origin <branch>", "Push to remote"),
            Entry("git push -u origin <branch>", "Push and set upstream"),
            Entry("git pull", "Fetch and merge"),
            Entry("git fetch", "Fetch without merge"),
        )),
        Topic("Cloning", (
            Entry("git clone <url>", "Clone repository"),
            Entry("git clone <url> <dir>", "Clone to directory"),
        )),
    )),
    Module("Undoing Changes", (
        Topic("Unstaging & Reverting", (
            Entry("git restore <file>", "Discard changes"),
            Entry("git restore --staged <file>", "Unstage file"),
            Entry("git reset HEAD~1", "Undo last commit (keep changes)"),
            Entry("git reset --hard HEAD~1", "Undo and discard changes"),
        )),
        Topic("Revert & Amend", (
            Entry("git revert <commit>", "Revert a commit"),
            Entry("git commit --amend", "Modify last commit"),
            Entry('git commit --amend -m "new"', "Change commit message"),
        )),
    )),
    Module("Advanced", (
        Topic("Stashing", (
            Entry("git stash", "Stash changes"),
            Entry("git stash pop", "Apply and remove stash"),
            Entry("git stash list", "List stashes"),
            Entry("git stash drop", "Delete stash"),
        )),
        Topic("Rebasing", (
            Entry("git rebase <branch>", "Rebase onto branch"),
            Entry("git rebase -i HEAD~3", "Interactive rebase"),
            Entry("git rebase --abort", "Abort rebase"),
        )),
        Topic("Tags", (
            Entry("git tag <name>", "Create tag"),
            Entry('git tag -a <name> -m "msg"', "Annotated tag"),
            Entry("git push --tags", "Push all tags"),
        )),
    )),
)


def find_module(query: str) -> Module | None:
    """Look a module up by 1-based number or case-insensitive name."""
    if query.isdigit():
        number = int(query)
        return COURSE[number - 1] if 1 <= number <= len(COURSE) else None
    wanted = query.strip().lower()
    return next((m for m in COURSE if m.name.lower() == wanted), None)


def outline() -> list[str]:
    lines = ["Git Reference:"]
    for number, module in enumerate(COURSE, start=1):
        titles = ", ".join(topic.title for topic in module.topics)
        lines.append(f"  {number}. {module.name} ({titles})")
    lines.append("Run 'guide <number>' or 'guide <name>' for the commands.")
    return lines


def describe(module: Module) -> list[str]:
    """Commands of a module; '*' marks the ones this sandbox runs."""
    lines = [module.name]
    for topic in module.topics:
        lines += ["", f"  {topic.title}"]
        width = max(len(entry.command) for entry in topic.entries)
        for entry in topic.entries:
            mark = "*" if entry.supported else " "
            lines.append(f"  {mark} {entry.command.ljust(width)}  {entry.description}")
    lines += ["", "* runs in this sandbox"]
    return lines
