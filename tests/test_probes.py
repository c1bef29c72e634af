"""Unit tests for the ssh and gpg probes."""

from conftest import FakeRunner, SSH_G_OUTPUT, make_socket

from gpgfwd.probes import GPGProbe, SSHProbe
from gpgfwd.utils import Config


class TestSSHProbe:

    def test_filter_options_matches_anywhere_case_insensitive(self):
        text = "User alice\nuserknownhostsfile ~/.ssh/known_hosts\nciphers aes\nRemoteForward /a /b\n"
        matches = SSHProbe.filter_options(text, ["user", "remoteforward"])
        assert matches == [
            "User alice",
            "userknownhostsfile ~/.ssh/known_hosts",
            "RemoteForward /a /b",
        ]

    def test_filter_options_with_default_keys(self):
        matches = SSHProbe.filter_options(SSH_G_OUTPUT, Config().relevant_ssh_options)
        assert "compression no" not in matches
        assert "streamlocalbindunlink yes" in matches
        assert len(matches) == 7

    def test_filter_options_nothing_relevant(self):
        assert SSHProbe.filter_options("ciphers aes\n", ["forwardagent"]) == []
        assert SSHProbe.filter_options("user x\n", []) == []

    def test_control_connection_command(self):
        runner = FakeRunner()
        probe = SSHProbe(runner, control_check_timeout=4.0)
        probe.control_connection("devbox")
        assert runner.calls == [["ssh", "-O", "check", "devbox"]]

    def test_open_session_forces_tty(self):
        runner = FakeRunner()
        probe = SSHProbe(runner, ssh_binary="/usr/bin/ssh")
        probe.open_session("devbox", "hostname\n")
        assert runner.interactive_calls == [(["/usr/bin/ssh", "-tt", "devbox", "bash"], "hostname\n")]


class TestGPGProbe:

    def test_version_of_missing_binary(self):
        probe = GPGProbe(FakeRunner(missing={"gpg-agent"}))
        assert probe.version("gpg-agent") is None

    def test_socket_status_for_real_socket(self, short_dir):
        make_socket(short_dir / "S.gpg-agent")
        status = GPGProbe.socket_status(short_dir, "S.gpg-agent")
        assert status.exists
        assert status.is_socket

    def test_regular_file_is_not_a_socket(self, short_dir):
        (short_dir / "S.gpg-agent").write_text("")
        status = GPGProbe.socket_status(short_dir, "S.gpg-agent")
        assert status.exists
        assert not status.is_socket

    def test_missing_socket(self, short_dir):
        status = GPGProbe.socket_status(short_dir, "S.scdaemon")
        assert not status.exists
        assert not status.is_socket

    def test_list_directory(self, short_dir):
        make_socket(short_dir / "S.gpg-agent")
        (short_dir / "notes").write_text("x")
        listing = GPGProbe.list_directory(short_dir)
        assert listing.error is None
        assert len(listing.lines) == 2
        assert listing.lines[0].startswith("s")
        assert listing.lines[0].endswith(" S.gpg-agent")
        assert listing.lines[1].startswith("-rw")
        assert listing.lines[1].endswith(" notes")

    def test_list_missing_directory(self, short_dir):
        listing = GPGProbe.list_directory(short_dir / "nope")
        assert listing.error
        assert listing.lines == []
