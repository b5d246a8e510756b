"""CLI parser, subcommand dispatch, and exception handler."""

import argparse
import sys

from izi import __version__, constants
from izi.api import IziClient
from izi.config import Config, load_config, save_config, setup_logging
from izi.format import format_error
from izi.util import AuthError, IziError


class IziArgumentParser(argparse.ArgumentParser):
    """Custom parser that exits with code 3 on usage errors (not 2)."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        print(format_error(message), file=sys.stderr)
        sys.exit(3)


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {raw}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {raw}")
    return value


def _client(config: Config) -> IziClient:
    return IziClient(config)


def _raise_on_errors(errors) -> None:
    """Print each validation error and abort before any network call."""
    if not errors:
        return
    for error in errors:
        print(format_error(str(error)), file=sys.stderr)
    noun = "error" if len(errors) == 1 else "errors"
    raise IziError(f"{len(errors)} validation {noun}", exit_code=3)


def _load_prompt_file(path: str):
    """Check the extension, read the file, and decode its frontmatter."""
    from izi.frontmatter import parse_frontmatter
    from izi.util import read_text_file
    from izi.validation import validate_file_extension

    _raise_on_errors([e for e in [validate_file_extension(path)] if e])
    return parse_frontmatter(read_text_file(path))


def _fill_missing(
    name: str | None, description: str | None, tags: list[str]
) -> tuple[str, str, list[str]]:
    """Ask for whatever metadata the file and flags didn't provide."""
    from izi.util import ask, split_tags

    if not name:
        name = ask("Prompt name:")
    if not description:
        description = ask("Prompt description:")
    if not tags:
        tags = split_tags(ask("Tags (comma-separated):", required=False))
    return name, description, tags


def cmd_auth(args, config: Config) -> int:
    """Handler for `izi auth`."""
    from izi.auth import authenticate

    user = authenticate(config, token=getattr(args, "token", None))
    if user is None:
        return 0

    from izi.format import format_json, get_output_mode

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(authenticated=True, username=user.username))
    else:
        print(f"OK authenticated as {user.username}")
        if mode == "verbose":
            print(f"Token saved for {config.api_url}")
    return 0


def cmd_logout(args, config: Config) -> int:
    """Handler for `izi logout`."""
    from izi.auth import logout

    logout(config)
    print("OK logged out. Run `izi auth` to log back in.")
    return 0


def cmd_whoami(args, config: Config) -> int:
    """Handler for `izi whoami`."""
    from izi.auth import require_auth
    from izi.format import format_json, get_output_mode

    require_auth(config)
    mode = get_output_mode(args)

    cached = False
    try:
        user = _client(config).get_current_user()
    except IziError as e:
        if not config.username:
            raise
        print(f"WARN: {e}; showing cached user", file=sys.stderr)
        from izi.models import User

        user = User(username=config.username)
        cached = True

    if mode == "json":
        print(format_json(username=user.username, email=user.email, cached=cached))
        return 0

    print(user.username)
    if mode == "verbose" and user.email:
        print(f"Email: {user.email}")
    return 0


def cmd_search(args, config: Config) -> int:
    """Handler for `izi search`."""
    from izi.auth import require_auth
    from izi.format import format_json, format_prompt_list, get_output_mode

    require_auth(config)
    result = _client(config).search_prompts(args.query, limit=args.limit)

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(prompts=result.prompts, total=result.total))
        return 0

    output = format_prompt_list(result.prompts, mode, show_author=True)
    if output:
        print(output)
        if mode == "verbose":
            print(f"\nFound {result.total} prompts. Use `izi clone <prompt-id>` to download one.")
    else:
        print("No prompts found matching your query.")
    return 0


def cmd_list(args, config: Config) -> int:
    """Handler for `izi list`."""
    from izi.auth import require_auth
    from izi.format import format_json, format_prompt_list, get_output_mode

    require_auth(config)
    prompts = _client(config).list_user_prompts()
    shown = prompts[: args.limit]

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(prompts=shown, total=len(prompts)))
        return 0

    if not prompts:
        print("You haven't created any prompts yet. Create one with: izi push <file>")
        return 0

    print(format_prompt_list(shown, mode))
    if len(prompts) > args.limit:
        print(
            f"Showing {args.limit} of {len(prompts)} prompts. Use --limit to see more.",
            file=sys.stderr,
        )
    return 0


def cmd_create(args, config: Config) -> int:
    """Handler for `izi create`: prepare metadata locally without uploading."""
    from izi.auth import require_auth
    from izi.util import split_tags
    from izi.validation import validate_prompt_data

    require_auth(config)
    parsed = _load_prompt_file(args.file)
    meta = parsed.metadata

    name = getattr(args, "name", None) or meta.name
    description = getattr(args, "description", None) or meta.description
    raw_tags = getattr(args, "tags", None)
    tags = split_tags(raw_tags) if raw_tags else list(meta.tags)

    _raise_on_errors(
        validate_prompt_data(
            name=name, description=description, content=parsed.content, tags=tags
        )
    )
    name, description, tags = _fill_missing(name, description, tags)
    _raise_on_errors(validate_prompt_data(name=name, description=description, tags=tags))

    from izi.format import format_json, get_output_mode

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(
            name=name, description=description, tags=tags,
            content_length=len(parsed.content),
        ))
        return 0

    print("OK prompt metadata prepared")
    print(f"Name: {name}")
    print(f"Description: {description}")
    if tags:
        print(f"Tags: {', '.join(tags)}")
    print(f"Content: {len(parsed.content)} characters")
    print(f'Use "izi push {args.file}" to upload this prompt.', file=sys.stderr)
    return 0


def cmd_push(args, config: Config) -> int:
    """Handler for `izi push`: create a prompt, or update one when an id is known."""
    from izi.auth import require_auth
    from izi.validation import validate_prompt_data

    require_auth(config)
    parsed = _load_prompt_file(args.file)
    meta = parsed.metadata
    prompt_id = getattr(args, "id", None) or meta.id

    _raise_on_errors(
        validate_prompt_data(
            name=meta.name,
            description=meta.description,
            content=parsed.content,
            tags=meta.tags,
        )
    )
    name, description, tags = _fill_missing(meta.name, meta.description, list(meta.tags))
    _raise_on_errors(validate_prompt_data(name=name, description=description, tags=tags))

    client = _client(config)
    if prompt_id:
        result = client.update_prompt(
            prompt_id,
            name=name,
            description=description,
            content=parsed.content,
            tags=tags,
        )
        action = "updated"
    else:
        result = client.create_prompt(name, description, parsed.content, tags)
        action = "pushed"

    from izi.format import format_json, get_output_mode

    mode = get_output_mode(args)
    url = constants.prompt_url(result.id)
    if mode == "json":
        print(format_json(**{action: True}, id=result.id, name=result.name, url=url))
    else:
        print(f"OK {action} {args.file} -> {result.id}")
        if mode == "verbose":
            print(f"Name: {result.name}")
            print(f"URL: {url}")
            print(f"Clone it with: izi clone {result.id}")
    return 0


def cmd_clone(args, config: Config) -> int:
    """Handler for `izi clone`."""
    from izi.auth import require_auth
    from izi.frontmatter import FrontmatterData, generate_frontmatter

    require_auth(config)
    prompt = _client(config).get_prompt(args.prompt_id)

    metadata = FrontmatterData(
        name=prompt.name,
        description=prompt.description,
        tags=prompt.tags,
        author=prompt.author,
        id=prompt.id,
    )
    text = generate_frontmatter(metadata, prompt.content)
    if not text.endswith("\n"):
        text += "\n"

    output = args.output
    try:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise IziError(f"cannot write file: {e}", exit_code=3)

    from izi.format import format_json, format_tags, get_output_mode

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(cloned=True, id=prompt.id, name=prompt.name, file=output))
        return 0

    print(f'OK cloned "{prompt.name}" -> {output}')
    if mode == "verbose":
        print(f"Author: {prompt.author or '(unknown)'}")
        if prompt.tags:
            print(f"Tags: {format_tags(prompt.tags)}")
        print(f"Push changes with: izi push {output} --id {prompt.id}")
    return 0


_CONFIG_KEYS = {
    "apiurl": "api_url",
    "url": "api_url",
    "username": "username",
    "token": "api_token",
}


def _config_value(config: Config, attr: str) -> str:
    if attr == "api_token":
        value = config.masked_token()
    else:
        value = getattr(config, attr)
    return value or "(not set)"


def cmd_config(args, config: Config) -> int:
    """Handler for `izi config get|set|list`."""
    action = args.action.lower()
    key = getattr(args, "key", None)
    value = getattr(args, "value", None)

    if action == "list":
        from izi.format import format_json, get_output_mode

        if get_output_mode(args) == "json":
            print(format_json(
                api_url=config.api_url,
                username=config.username,
                token=config.masked_token(),
            ))
        else:
            print(f"api-url\t{_config_value(config, 'api_url')}")
            print(f"username\t{_config_value(config, 'username')}")
            print(f"token\t{_config_value(config, 'api_token')}")
        return 0

    if action not in ("get", "set"):
        raise IziError(
            f'unknown action "{args.action}" (expected get, set, or list)',
            exit_code=3,
        )
    if not key:
        raise IziError(f'key is required for "{action}"', exit_code=3)

    attr = _CONFIG_KEYS.get(key.lower().replace("-", "").replace("_", ""))
    if attr is None:
        raise IziError(
            f'unknown config key "{key}" (available: api-url, username, token)',
            exit_code=3,
        )

    if action == "get":
        print(_config_value(config, attr))
        return 0

    if attr != "api_url":
        raise IziError(
            f'cannot set "{key}"; use `izi auth` for credentials', exit_code=3
        )
    if not value:
        raise IziError('value is required for "set"', exit_code=3)
    config.api_url = value
    save_config(config)
    print(f"OK api-url set to {value}")
    return 0


def build_parser() -> IziArgumentParser:
    """Build the CLI argument parser with all subcommands."""
    parser = IziArgumentParser(
        prog="izi",
        description="CLI for managing prompts on gitizi.com",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"izi {__version__}",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Log HTTP requests to stderr",
    )

    # Global output mode flags via a parent parser so they work
    # both before and after the subcommand name.
    output_parent = argparse.ArgumentParser(add_help=False)
    output_group = output_parent.add_mutually_exclusive_group()
    output_group.add_argument(
        "--json", action="store_true", default=argparse.SUPPRESS, help="JSON output",
    )
    output_group.add_argument(
        "--verbose", action="store_true", default=argparse.SUPPRESS,
        help="Detailed output",
    )

    top_output_group = parser.add_mutually_exclusive_group()
    top_output_group.add_argument("--json", action="store_true", help="JSON output")
    top_output_group.add_argument(
        "--verbose", action="store_true", help="Detailed output"
    )

    sub = parser.add_subparsers(dest="command")

    # auth
    auth_p = sub.add_parser("auth", parents=[output_parent], help="Authenticate with gitizi.com")
    auth_p.add_argument("-t", "--token", help="API token")
    auth_p.set_defaults(func=cmd_auth)

    # search
    search_p = sub.add_parser("search", parents=[output_parent], help="Search prompts")
    search_p.add_argument("query", help="Search query")
    search_p.add_argument(
        "-l", "--limit", type=_positive_int,
        default=constants.DEFAULT_SEARCH_LIMIT, help="Limit results",
    )
    search_p.set_defaults(func=cmd_search)

    # create
    create_p = sub.add_parser(
        "create", parents=[output_parent],
        help="Prepare a prompt from a markdown file (no upload)",
    )
    create_p.add_argument("file", help="Markdown file path")
    create_p.add_argument("-n", "--name", help="Prompt name")
    create_p.add_argument("-d", "--description", help="Prompt description")
    create_p.add_argument("--tags", help="Comma-separated tags")
    create_p.set_defaults(func=cmd_create)

    # push
    push_p = sub.add_parser("push", parents=[output_parent], help="Upload a prompt file")
    push_p.add_argument("file", help="Markdown file path")
    push_p.add_argument("--id", help="Prompt ID to update (default: id in frontmatter)")
    push_p.set_defaults(func=cmd_push)

    # clone
    clone_p = sub.add_parser("clone", parents=[output_parent], help="Download a prompt")
    clone_p.add_argument("prompt_id", help="Prompt ID to clone")
    clone_p.add_argument(
        "-o", "--output", default="./prompt.md", help="Output file path",
    )
    clone_p.set_defaults(func=cmd_clone)

    # list
    list_p = sub.add_parser("list", parents=[output_parent], help="List your prompts")
    list_p.add_argument(
        "-l", "--limit", type=_positive_int,
        default=constants.DEFAULT_SEARCH_LIMIT, help="Limit results",
    )
    list_p.set_defaults(func=cmd_list)

    # logout
    logout_p = sub.add_parser("logout", help="Clear stored credentials")
    logout_p.set_defaults(func=cmd_logout)

    # whoami
    whoami_p = sub.add_parser("whoami", parents=[output_parent], help="Show current user")
    whoami_p.set_defaults(func=cmd_whoami)

    # config
    config_p = sub.add_parser("config", parents=[output_parent], help="Manage configuration")
    config_p.add_argument("action", help="get, set, or list")
    config_p.add_argument("key", nargs="?", help="Config key")
    config_p.add_argument("value", nargs="?", help="Config value")
    config_p.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the izi CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help(sys.stderr)
        return 3

    if getattr(args, "json", False) and getattr(args, "verbose", False):
        parser.error("--json and --verbose are mutually exclusive")

    setup_logging("DEBUG" if args.debug else None)
    config = load_config()

    try:
        return args.func(args, config)
    except AuthError as e:
        print(format_error(str(e)), file=sys.stderr)
        return 2
    except IziError as e:
        print(format_error(str(e)), file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print(format_error("cancelled"), file=sys.stderr)
        return 130
    except Exception as e:
        print(format_error(f"unexpected error: {e}"), file=sys.stderr)
        return 1
