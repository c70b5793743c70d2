import unittest

from netsim.core import VLAN_UNSUPPORTED, NetworkStore
from netsim.cli import (
    INCOMPLETE_COMMAND,
    INVALID_INPUT,
    VLAN_MODE_NESTED,
    VLAN_NEEDS_CONFIG,
    CLIEngine,
)


def _access_layer():
    # SW1 Gi0/1 -> PC1 (L1), Gi0/2 -> SW2 (L2), Gi0/3 -> PRN1 (L3)
    store = NetworkStore()
    store.add_device("SW1", "SWITCH_L2", mgmt_ip="10.0.0.2")
    store.add_device("PC1", "PC", mgmt_ip="10.0.0.10")
    store.add_device("SW2", "SWITCH_L2", mgmt_ip="10.0.0.3")
    store.add_device("PRN1", "PRINTER", mgmt_ip="10.0.0.20")
    store.add_link("SW1", "PC1")
    store.add_link("SW1", "SW2")
    store.add_link("SW1", "PRN1")
    return store


def _config_session(store, uid="SW1"):
    cli = CLIEngine(store)
    ctx = cli.new_context(uid)
    cli.execute(ctx, "enable")
    cli.execute(ctx, "configure terminal")
    return cli, ctx


class TestVlanConfig(unittest.TestCase):
    def test_vlan_creates_with_default_name(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        res = cli.execute(ctx, "vlan 10")
        self.assertEqual(res.output, "")
        self.assertEqual(ctx.mode, "config-vlan")
        self.assertEqual(res.prompt, "SW1(config-vlan)#")
        self.assertEqual(store.device("SW1").vlans[10], "VLAN0010")

    def test_vlan_name(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "vlan 20")
        cli.execute(ctx, "name ENGINEERING")
        self.assertEqual(store.device("SW1").vlans[20], "ENGINEERING")

        out = cli.execute(ctx, "do show vlan brief").output
        self.assertIn("20   ENGINEERING", out)

    def test_nested_vlan_in_vlan_mode(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "vlan 10")
        self.assertEqual(cli.execute(ctx, "vlan 20").output, VLAN_MODE_NESTED)
        self.assertEqual(cli.execute(ctx, "30").output, VLAN_MODE_NESTED)
        self.assertNotIn(20, store.device("SW1").vlans)
        self.assertEqual(ctx.current_vlan, 10)

    def test_vlan_outside_config_mode(self):
        store = _access_layer()
        cli = CLIEngine(store)
        ctx = cli.new_context("SW1")
        cli.execute(ctx, "enable")
        self.assertEqual(cli.execute(ctx, "vlan 10").output, VLAN_NEEDS_CONFIG)
        self.assertNotIn(10, store.device("SW1").vlans)

    def test_vlan_rejected_on_non_switch(self):
        store = NetworkStore()
        store.add_device("R1", "ROUTER")
        cli, ctx = _config_session(store, "R1")
        self.assertEqual(cli.execute(ctx, "vlan 10").output, VLAN_UNSUPPORTED)
        self.assertEqual(ctx.mode, "config")
        self.assertEqual(store.device("R1").vlans, {1: "default"})

    def test_vlan_id_out_of_range(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        self.assertEqual(cli.execute(ctx, "vlan 4095").output, INVALID_INPUT)
        self.assertEqual(cli.execute(ctx, "vlan abc").output, INVALID_INPUT)
        self.assertEqual(ctx.mode, "config")

    def test_no_vlan(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "vlan 10")
        cli.execute(ctx, "exit")
        cli.execute(ctx, "no vlan 10")
        self.assertNotIn(10, store.device("SW1").vlans)
        self.assertEqual(cli.execute(ctx, "no vlan 1").output, "% Default VLAN 1 may not be deleted.")


class TestInterfaceConfig(unittest.TestCase):
    def test_access_vlan_tags_end_host_neighbor(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "interface g0/1")
        res = cli.execute(ctx, "switchport access vlan 10")
        self.assertEqual(res.output, "[Sim]: Assigned neighbor device on GigabitEthernet0/1 to VLAN 10")
        self.assertEqual(store.device("PC1").display_vlan, 10)
        self.assertEqual(store.device("SW1").interfaces["GigabitEthernet0/1"].access_vlan, 10)

        cli.execute(ctx, "int g0/3")
        cli.execute(ctx, "sw acc vl 30")
        self.assertEqual(store.device("PRN1").display_vlan, 30)

    def test_access_vlan_leaves_switch_neighbor_alone(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "interface g0/2")
        res = cli.execute(ctx, "switchport access vlan 20")
        self.assertEqual(res.output, "")
        self.assertIsNone(store.device("SW2").display_vlan)
        self.assertEqual(store.device("SW1").interfaces["GigabitEthernet0/2"].access_vlan, 20)

    def test_access_vlan_on_unmapped_port(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "interface g0/9")
        self.assertEqual(cli.execute(ctx, "switchport access vlan 20").output, "")

    def test_tag_does_not_affect_reachability(self):
        store = _access_layer()
        before = store.find_path("PC1", "PRN1")
        cli, ctx = _config_session(store)
        cli.execute(ctx, "int g0/1")
        cli.execute(ctx, "switchport access vlan 10")
        after = store.find_path("PC1", "PRN1")
        self.assertEqual((before.success, before.path), (after.success, after.path))

    def test_ip_address_needs_exactly_two_arguments(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "int g0/1")
        self.assertEqual(cli.execute(ctx, "ip address 10.0.0.1").output, INCOMPLETE_COMMAND)
        self.assertEqual(cli.execute(ctx, "ip address").output, INCOMPLETE_COMMAND)
        self.assertIsNone(store.device("SW1").interfaces["GigabitEthernet0/1"].ip)

        cli.execute(ctx, "ip add 10.0.0.1 255.255.255.0")
        itf = store.device("SW1").interfaces["GigabitEthernet0/1"]
        self.assertEqual((itf.ip, itf.mask), ("10.0.0.1", "255.255.255.0"))

        cli.execute(ctx, "no ip address")
        self.assertIsNone(itf.ip)

    def test_bad_ip_is_accepted_at_config_time(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "int g0/1")
        self.assertEqual(cli.execute(ctx, "ip address banana 255.0.0.0").output, "")

    def test_shutdown_notices(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "int g0/1")
        self.assertEqual(
            cli.execute(ctx, "shutdown").output,
            "%LINK-5-CHANGED: Interface GigabitEthernet0/1, changed state to administratively down",
        )
        self.assertTrue(store.link_is_down("L1"))
        self.assertEqual(
            cli.execute(ctx, "no shutdown").output,
            "%LINK-3-UPDOWN: Interface GigabitEthernet0/1, changed state to up",
        )
        self.assertFalse(store.link_is_down("L1"))

    def test_switchport_mode_and_trunk_settings(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "int g0/2")
        cli.execute(ctx, "switchport mode tr")
        cli.execute(ctx, "switchport trunk allowed vlan 10,20-30")
        cli.execute(ctx, "switchport trunk native vlan 99")
        itf = store.device("SW1").interfaces["GigabitEthernet0/2"]
        self.assertEqual(itf.switchport_mode, "trunk")
        self.assertEqual(itf.trunk_allowed, "10,20-30")
        self.assertEqual(itf.native_vlan, 99)

        self.assertEqual(cli.execute(ctx, "switchport mode sideways").output, INVALID_INPUT)
        self.assertEqual(itf.switchport_mode, "trunk")

    def test_description(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "int g0/1")
        cli.execute(ctx, "description uplink to PC1")
        itf = store.device("SW1").interfaces["GigabitEthernet0/1"]
        self.assertEqual(itf.description, "uplink to PC1")
        cli.execute(ctx, "no desc")
        self.assertIsNone(itf.description)

    def test_reentering_interface_keeps_settings(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "int g0/1")
        cli.execute(ctx, "ip address 10.0.0.1 255.255.255.0")
        cli.execute(ctx, "exit")
        cli.execute(ctx, "interface GigabitEthernet0/1")
        self.assertEqual(store.device("SW1").interfaces["GigabitEthernet0/1"].ip, "10.0.0.1")


class TestGlobalConfig(unittest.TestCase):
    def test_hostname_changes_prompt_and_label(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        res = cli.execute(ctx, "hostname CORE1")
        self.assertEqual(res.prompt, "CORE1(config)#")
        self.assertEqual(store.device("SW1").label, "CORE1")

    def test_routing_and_domain(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "ip routing")
        cli.execute(ctx, "ip domain-name lab.local")
        dev = store.device("SW1")
        self.assertTrue(dev.ip_routing)
        self.assertEqual(dev.domain_name, "lab.local")
        cli.execute(ctx, "no ip routing")
        self.assertFalse(dev.ip_routing)

    def test_line_configuration(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "line con 0")
        self.assertEqual(ctx.mode, "config-line")
        self.assertEqual(ctx.current_line, "console")
        cli.execute(ctx, "password cisco")
        cli.execute(ctx, "login")
        cfg = store.device("SW1").lines["console"]
        self.assertEqual((cfg.password, cfg.login), ("cisco", True))
        cli.execute(ctx, "no login")
        self.assertFalse(cfg.login)

        cli.execute(ctx, "exit")
        self.assertEqual(cli.execute(ctx, "line aux 0").output, INVALID_INPUT)


class TestShowCommands(unittest.TestCase):
    def test_running_config(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        for cmd in (
            "hostname CORE1",
            "ip routing",
            "vlan 10",
            "name SALES",
            "exit",
            "int g0/1",
            "switchport access vlan 10",
            "ip address 10.0.0.1 255.255.255.0",
            "shutdown",
            "exit",
            "line vty 0 4",
            "password cisco",
            "login",
            "end",
        ):
            cli.execute(ctx, cmd)

        out = cli.execute(ctx, "show running-config").output
        lines = out.split("\n")
        self.assertEqual(lines[:4], ["Building configuration...", "", "version 15.2", "hostname CORE1"])
        self.assertIn("ip routing", lines)
        self.assertIn("vlan 10\n name SALES", out)
        self.assertNotIn("vlan 1\n", out)
        self.assertIn(
            "interface GigabitEthernet0/1\n switchport mode access\n switchport access vlan 10\n"
            " ip address 10.0.0.1 255.255.255.0\n shutdown",
            out,
        )
        self.assertIn("line vty 0 4\n password cisco\n login", out)
        self.assertNotIn("line con 0", out)
        self.assertEqual(lines[-1], "end")

    def test_vlan_brief_lists_access_ports(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "vlan 10")
        cli.execute(ctx, "name SALES")
        cli.execute(ctx, "exit")
        cli.execute(ctx, "int g0/1")
        cli.execute(ctx, "switchport access vlan 10")
        cli.execute(ctx, "int g0/2")
        cli.execute(ctx, "end")

        out = cli.execute(ctx, "show vlan brief").output
        lines = out.split("\n")
        self.assertTrue(lines[0].startswith("VLAN Name"))
        self.assertTrue(lines[1].startswith("---- "))
        self.assertTrue(lines[2].startswith("1    default"))
        self.assertTrue(lines[2].endswith("Gi0/2"))
        self.assertTrue(lines[3].startswith("10   SALES"))
        self.assertTrue(lines[3].endswith("Gi0/1"))
        self.assertEqual(cli.execute(ctx, "show vlan").output, out)

    def test_ip_interface_brief(self):
        store = _access_layer()
        cli, ctx = _config_session(store)
        cli.execute(ctx, "int g0/1")
        cli.execute(ctx, "ip address 10.0.0.1 255.255.255.0")
        cli.execute(ctx, "shutdown")
        cli.execute(ctx, "int Loopback0")
        cli.execute(ctx, "end")

        lines = cli.execute(ctx, "show ip interface brief").output.split("\n")
        self.assertEqual(lines[0], "Interface              IP-Address      OK? Method Status                Protocol")
        names = [l.split()[0] for l in lines[1:]]
        self.assertEqual(names, ["GigabitEthernet0/1", "GigabitEthernet0/2", "GigabitEthernet0/3", "Loopback0"])
        self.assertIn("10.0.0.1", lines[1])
        self.assertIn("manual", lines[1])
        self.assertIn("admin down", lines[1])
        self.assertTrue(lines[1].endswith("down"))
        self.assertIn("unassigned", lines[2])
        self.assertTrue(lines[2].endswith("up"))

    def test_ip_interface_brief_without_links(self):
        store = NetworkStore()
        store.add_device("R1", "ROUTER")
        cli = CLIEngine(store)
        ctx = cli.new_context("R1")
        cli.execute(ctx, "enable")
        lines = cli.execute(ctx, "show ip interface brief").output.split("\n")
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[1].startswith("GigabitEthernet0/1"))

    def test_show_version_and_history(self):
        store = _access_layer()
        cli = CLIEngine(store)
        ctx = cli.new_context("SW1")
        self.assertIn("Cisco IOS Software", cli.execute(ctx, "show version").output)
        cli.execute(ctx, "enable")
        out = cli.execute(ctx, "show history").output
        self.assertEqual(out.split("\n"), ["  show version", "  enable", "  show history"])


class TestPing(unittest.TestCase):
    def setUp(self):
        self.store = NetworkStore()
        self.store.add_device("R1", "ROUTER", mgmt_ip="10.0.0.1")
        self.store.add_device("SW1", "SWITCH_L2")
        self.store.add_device("PC1", "PC", mgmt_ip="10.0.0.10")
        self.store.add_link("R1", "SW1")
        self.store.add_link("SW1", "PC1")
        self.cli = CLIEngine(self.store)
        self.ctx = self.cli.new_context("R1")

    def test_successful_ping(self):
        lines = self.cli.execute(self.ctx, "ping 10.0.0.10").output.split("\n")
        self.assertEqual(lines, [
            "Sending 5, 100-byte ICMP Echos to 10.0.0.10, timeout is 2 seconds:",
            "!!!!!",
            "Success rate is 100 percent (5/5).",
        ])

    def test_failed_ping_carries_engine_message(self):
        self.store.set_status("SW1", "down")
        lines = self.cli.execute(self.ctx, "ping 10.0.0.10").output.split("\n")
        self.assertEqual(lines[1:3], [".....", "Success rate is 0 percent (0/5)."])
        self.assertEqual(lines[3], "Link Failure: Packet dropped at SW1 (Device is DOWN).")

    def test_ping_unknown_address(self):
        lines = self.cli.execute(self.ctx, "ping 10.9.9.9").output.split("\n")
        self.assertEqual(len(lines), 3)
        self.assertEqual(lines[1], ".....")

    def test_ping_from_privileged_mode(self):
        self.cli.execute(self.ctx, "enable")
        self.assertIn("!!!!!", self.cli.execute(self.ctx, "p 10.0.0.10").output)


if __name__ == "__main__":
    unittest.main()
