# bcvk

Helpers for working with bootc container images as virtual machines,
driven through podman, skopeo, libvirt (`virsh`) and `systemd-run`.

## Installation

```
pip install .
```

## Command line

The `bcvk-ephemeral` command manages ephemeral VM containers, which are
the podman containers that carry the `bcvk.ephemeral=1` label:

```
bcvk-ephemeral ps            # table of ephemeral VM containers
bcvk-ephemeral ps --json     # the same list as JSON
bcvk-ephemeral rm-all        # remove them all, asking first
bcvk-ephemeral rm-all -f     # remove them all without asking
```

It exits with status 1 and prints an error if podman fails or returns
output it cannot read.

## Library

- `bcvk.arch` – `ArchConfig.detect()` gives the libvirt machine type, the
  XML features and timers, and the CPU mode for x86_64 or aarch64; other
  architectures raise `UnsupportedArchitectureError`. `host_arch()`,
  `is_x86_64()` and `is_aarch64()` check the host.
- `bcvk.containerenv` – `parse_containerenv()` reads podman's
  `/run/.containerenv` file; `is_container()` and
  `get_container_execution_info()` look for it under a root directory.
- `bcvk.envdetect` – `Environment.get_cached()` tells whether the process
  runs in a container, whether it holds CAP_SYS_ADMIN, and whether it uses
  the host PID namespace.
- `bcvk.hostexec` – `command()` builds an argument list that runs a
  program on the host. From inside a privileged container with
  `--pid=host` it goes through `systemd-run`, and the unit it starts is
  bound to the container's scope. `run()` executes such a command and
  raises `HostExecError` on a non-zero exit; `parse_env()` reads the
  output of `env`.
- `bcvk.images` – `list_images()`, `inspect()`, `get_image_size()` and
  `get_image_digest()` query podman and skopeo for bootc images.
  `format_size()`, `format_relative_time()` and `render_image_table()`
  format them, and `run_list()` prints the list as a table or as JSON.
- `bcvk.domain_list` – `DomainLister` lists the libvirt domains that
  carry bootc metadata, using `virsh`, and raises `DomainListError` when
  `virsh` fails.
- `bcvk.ephemeral` – `list_ephemeral_containers()`, `ps()` and
  `remove_all_ephemeral_containers()`, which back the command above.
- `bcvk.container_entrypoint` – `ContainerConfig` reads and writes the
  JSON VM configuration; `build_ssh_command()` and `ssh_to_vm()` run ssh
  to a VM at `root@10.0.2.15` from inside its container.
- `bcvk.install_options` – `InstallOptions.to_bootc_args()` turns
  filesystem options into arguments for `bootc install`.
- `bcvk.common_opts` – `MemoryOpts` adds a `--memory` option (default `4G`)
  to an argparse parser.
- `bcvk.cli_json` – `dump_cli_json()` exports the structure of an
  argparse parser as JSON, for generating documentation.

```python
from bcvk.images import format_size
from bcvk.install_options import InstallOptions

format_size(1536)  # '1.5 KB'
InstallOptions(filesystem="xfs").to_bootc_args()  # ['--filesystem', 'xfs']
```

## What it does not do

This package does not start, boot or stop virtual machines. It has no
command to run an image as an ephemeral VM, to open an ssh session to a
running ephemeral VM from the host, to create libvirt domains, or to
install an image to a disk file. It lists and removes existing
containers and domains, and builds the pieces such tools use.

## Tests

```
pip install .[test]
pytest
```