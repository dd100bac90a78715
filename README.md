# mullvadinst

A command-line installer for the Mullvad VPN desktop app on Linux systems that
have no Debian package manager. It fetches the newest desktop release from the
release API, checks the package's detached OpenPGP signature against the
Mullvad code-signing key, unpacks `data.tar.xz` from the `.deb` itself and
copies the package's `opt` and `usr` trees into `/opt` and `/usr`.

## Installing

```
pip install .
```

## Usage

The installer must run as root; otherwise it stops with "Need to be root".

```
sudo mullvadinst
```

A run goes through these steps:

1. A welcome banner is printed.
2. If `mullvad-daemon --version` works, the installed version is shown and you
   are asked whether to upgrade; answering no ends the run.
3. You choose the release channel: `1) stable` (default) or `2) beta`.
4. You confirm the action and channel.
5. Unless an upgrade was already accepted, you are asked whether to remove the
   old installation first; answering no ends the run.
6. You choose how the `.deb` is unpacked: the built-in ar reader with Python's
   `lzma` decompressor (default), or the system `ar` and `xz` programs.
7. The previous installation is removed: the `mullvad-daemon` service is
   stopped and its service files are deleted for the detected init system
   (systemd, runit, SysV init, OpenRC, s6 or dinit), then the installed
   binaries, icons, shell completions, desktop entry, documentation and
   `/opt/Mullvad VPN` are deleted.
8. The release is fetched (up to three attempts within ten seconds), the
   `.deb` for the host architecture is downloaded with a progress line,
   verified, unpacked into a temporary directory and copied into place.

Archive entries that would land outside the extraction directory, and
symlinks whose target climbs out with `../`, stop the extraction with an
error.

### Options

| Option               | Effect                                                                 |
|----------------------|------------------------------------------------------------------------|
| `--yes`              | answer every prompt with yes or its default choice                     |
| `--dry-run`          | answer prompts like `--yes` and only print what would be done           |
| `--no-color`         | plain output without colours                                           |
| `--force-remove-all` | implies `--yes`                                                        |
| `--channel NAME`     | accepted, but the channel used is the one chosen at the channel prompt |
| `--remove`           | names the action "remove" in the confirmation question                 |
| `--upgrade`          | names the action "upgrade" in the confirmation question                |

With `--yes` or `--dry-run` the stable channel and the built-in unpacker are
used.

Examples:

```
sudo mullvadinst --dry-run --no-color
sudo mullvadinst --yes
```

Temporary download directories are removed when the installer finishes, and
also when it is interrupted with SIGINT or SIGTERM.

## What it does not do

- It does not install, enable or start a service for `mullvad-daemon` after
  copying the files; set the daemon up with your init system yourself.
- `--remove` does not give a remove-only run: every run that goes ahead
  installs a release after the old installation is removed.

## Development

```
pip install -e .[test]
pytest
```