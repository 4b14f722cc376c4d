from __future__ import annotations

DEFAULTS = {
    "mirror_url": "http://mirrors.tuna.tsinghua.edu.cn",
    "upstream_url": "http://archive.ubuntu.com",
    "sources_files": [
        "/etc/apt/sources.list",
        "/etc/apt/sources.list.d/ubuntu.sources",
    ],
    "packages": ["build-essential", "python3-mako"],
    "firmware_dir": "/lib/firmware",
    "firmware_link_target": "~/rvm-intel.bin",
    "repo_url": "https://github.com/rvm-rtos/jailhouse.git",
    "branch": "rt",
    "source_dir": "jailhouse",
    # skip: reuse a matching checkout and go on to build; fail: abort
    "on_existing_source": "skip",
    "build_jobs": None,
    "cmdline_script": "./update-cmdline.sh",
    "skip_confirmation": False,
    # None waits for the operator indefinitely.
    "confirm_timeout_s": None,
    "reboot": True,
    "log_dir": None,
}
