# copygit

copygit manages the configuration behind keeping Git repositories in sync
across several hosting providers (GitHub, GitLab, Gitea or any generic Git
server). Providers are described once in a global configuration file; each
repository lists, in its own `.copygit.toml`, which of them it is copied to.

## Installation

```
pip install .
```

## Files

By default everything lives under `~/.copygit/` (set `COPYGIT_HOME` to move it;
see `copygit.paths`):

| File | Purpose |
| --- | --- |
| `config` | global configuration: providers, sync, daemon and log settings |
| `repos.toml` | registry of repositories managed by copygit |
| `credentials` | per-provider credentials; must have permissions `0600` |
| `daemon.pid` | PID of the running background daemon |

The global config path can be overridden with the `COPYGIT_CONFIG`
environment variable or the `-c/--config` option. The global config and the
credentials file are written with permissions `0600`.

## Command line

```
copygit --help
copygit --version
copygit config add-provider my-github github https://github.com
copygit config remove-provider my-github
copygit remove path/to/repo --clean
copygit health --output json
copygit daemon status
copygit daemon stop
copygit version
```

- `config add-provider <name> <type> <base-url>` accepts the types `github`,
  `gitlab`, `gitea` and `generic`, then asks on standard input for the
  authentication method (1 https, 2 ssh, 3 token; anything else means https).
  It creates the global config with default settings if none exists and
  refuses a name that is already configured.
- `config remove-provider <name>` deletes a provider from the global config.
- `remove <repo-path>` unregisters a repository (a leading `~` is expanded);
  with `--clean` it also deletes the repository's `.copygit.toml`.
- `health` sends a GET request to each provider's API endpoint (redirects are
  not followed, 10 second timeout) and reports it reachable for any status
  below 500. `--output json` prints a JSON array instead of text.
- `daemon status` reports whether the PID in `daemon.pid` belongs to a running
  process. `daemon stop` sends that process SIGTERM and removes the PID file;
  a stale PID file is removed and reported as an error.

Global options: `-j/--json` logs in JSON, `-v/--verbose` enables debug
logging, `-q/--quiet` shows errors only. Errors are logged and the command
exits with status 1.

## Validation

`GlobalConfig.validate()` returns a list of `ValidationError(field, message)`
entries: a version and at least one provider are required, each provider needs
a name, type and base URL, and at most one provider may be preferred. Base URLs
(`validate_base_url`) must use `http` or `https`; plain HTTP yields a warning,
and private, loopback and link-local addresses as well as
`metadata.google.internal` are rejected. `validate_repo_config` and
`validate_repo_registry` check the per-repo file and the registry.

## Credentials

`copygit.chain.default_chain()` tries, in order: default SSH keys in `~/.ssh`
(`id_ed25519`, `id_rsa`, `id_ecdsa`, only for providers using ssh),
environment variables named `COPYGIT_TOKEN_<PROVIDER>` (dashes become
underscores, upper-cased, e.g. `COPYGIT_TOKEN_MY_GITHUB`), and the credentials
file, which is ignored unless its permissions are exactly `0600`.
`ChainManager` wraps a chain; `FakeManager` and `FakeCredentialResolver` are
in-memory stand-ins for tests.

## Using it as a library

```python
from copygit.config import default_global_config
from copygit.models import AuthMethod, ProviderConfig, ProviderType
from copygit.registry import load_repo_registry, register_repo, save_repo_registry
from copygit.remote_urls import generate_remote_url

cfg = default_global_config()
cfg.providers["gh"] = ProviderConfig(
    name="gh",
    type=ProviderType.GITHUB,
    base_url="https://github.com",
    auth_method=AuthMethod.HTTPS,
)
for problem in cfg.validate():
    print(problem.field, problem.message)

print(generate_remote_url(cfg.providers["gh"], "someone", "project"))
# https://github.com/someone/project.git

registry = load_repo_registry("repos.toml")
register_repo(registry, "/home/someone/project", "project")
save_repo_registry("repos.toml", registry)
```

`copygit.remote_urls` also derives repository names, owners and a likely
provider from clone URLs, and `build_sync_targets` makes one enabled target
per configured provider. `copygit.repo_commands.interactive_provider_selection`
asks on standard input which providers a repository should sync to.

## What it does not do

copygit does not run git. It has no commands to initialise, clone, push,
sync, list or show the status of repositories, no `login` command, no git hook
management, and no way to start the background daemon — only to inspect and
stop one that is already running. Credentials are not read from the system
keyring or from git credential helpers.