import textwrap

from hostinit.files.options import set_option, set_options
from hostinit.files.repos import point_at_mirror, references_rocky

ROCKY_BASEOS = textwrap.dedent("""\
    [baseos]
    name=Rocky Linux $releasever - BaseOS
    mirrorlist=https://mirrors.rockylinux.org/mirrorlist?arch=$basearch&repo=BaseOS-$releasever$rltype
    #baseurl=http://dl.rockylinux.org/$contentdir/$releasever/BaseOS/$basearch/os/
    gpgcheck=1
    enabled=1
""")


def test_point_at_mirror_switches_to_fixed_baseurl():
    out = point_at_mirror(ROCKY_BASEOS, "https://mirrors.example.test/rockylinux/")
    assert "#mirrorlist=https://mirrors.rockylinux.org" in out
    assert "baseurl=https://mirrors.example.test/rockylinux/$releasever/BaseOS/$basearch/os/" in out
    assert "\n#baseurl" not in out
    assert "gpgcheck=1\nenabled=1\n" in out


def test_point_at_mirror_is_stable_on_second_pass():
    once = point_at_mirror(ROCKY_BASEOS, "https://m.test/rocky")
    assert point_at_mirror(once, "https://m.test/rocky") == once


def test_metalink_is_commented_out():
    out = point_at_mirror("  metalink=https://x\n", "https://m")
    assert out == "#metalink=https://x\n"


def test_references_rocky():
    assert references_rocky(ROCKY_BASEOS)
    assert not references_rocky("[docker-ce-stable]\nbaseurl=https://download.docker.com/linux/centos/\n")


def test_set_option_replaces_active_line():
    text = "Port 22\nPermitRootLogin no\n"
    assert set_option(text, "PermitRootLogin", "yes") == "Port 22\nPermitRootLogin yes\n"


def test_set_option_uncomments_when_no_active_line():
    text = "#PermitRootLogin prohibit-password\nUsePAM yes\n"
    assert set_option(text, "PermitRootLogin", "yes") == "PermitRootLogin yes\nUsePAM yes\n"


def test_set_option_appends_and_is_idempotent():
    text = "UsePAM yes"
    once = set_options(text, {"PubkeyAuthentication": "yes", "AuthorizedKeysFile": ".ssh/authorized_keys"})
    assert once == "UsePAM yes\nPubkeyAuthentication yes\nAuthorizedKeysFile .ssh/authorized_keys\n"
    assert set_options(once, {"PubkeyAuthentication": "yes", "AuthorizedKeysFile": ".ssh/authorized_keys"}) == once


def test_set_option_does_not_touch_prefixed_keys():
    text = "PasswordAuthenticationMethods any\n"
    out = set_option(text, "PasswordAuthentication", "yes")
    assert out == text + "PasswordAuthentication yes\n"


def test_set_option_value_with_backslashes_is_literal():
    text = "Banner /etc/issue\n#ForceCommand none\n"
    out = set_option(text, "Banner", r"C:\new\1")
    out = set_option(out, "ForceCommand", r"/bin/sh -c 'echo \g<0>'")
    assert "Banner C:\\new\\1\n" in out
    assert "ForceCommand /bin/sh -c 'echo \\g<0>'\n" in out
