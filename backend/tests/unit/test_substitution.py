"""
标记替换引擎单元测试
"""

import pytest

from iphone_export.models import ExportOptions, IOSConfigData
from iphone_export.template import TokenSubstitutionEngine


@pytest.fixture
def engine() -> TokenSubstitutionEngine:
    return TokenSubstitutionEngine()


def _fix(engine, text: str, options, config_data, debug: bool = False) -> str:
    return engine.fix_config_file(text.encode("utf-8"), options, config_data, debug).decode("utf-8")


class TestMarkers:
    """markers 模式测试"""

    def test_replace_identity_markers(self, engine, options, config_data, info_plist):
        """测试身份字段替换"""
        out = _fix(engine, info_plist, options, config_data)

        assert "\t<string>Example Game</string>" in out
        assert "\t<string>MyGame</string>" in out
        assert "\t<string>com.example.game</string>" in out
        assert "\t<string>Scan QR codes</string>" in out
        assert "$" not in out

    def test_unmarked_lines_verbatim(self, engine, options, config_data):
        """测试无标记行原样输出（含行尾与缺失的末尾换行）"""
        text = "line one\r\n  line two\nno newline at end"
        assert _fix(engine, text, options, config_data) == text

    def test_idempotent(self, engine, options, config_data, info_plist):
        """测试二次替换结果不变"""
        once = engine.fix_config_file(info_plist.encode("utf-8"), options, config_data, False)
        twice = engine.fix_config_file(once, options, config_data, False)
        assert once == twice

    def test_first_marker_per_line(self, engine, options, config_data):
        """测试每行只替换第一个命中的标记"""
        out = _fix(engine, "$name / $identifier\n", options, config_data)
        assert out == "Example Game / $identifier\n"

    def test_same_marker_repeated_in_line(self, engine, options, config_data):
        assert _fix(engine, "$binary-$binary", options, config_data) == "MyGame-MyGame"

    def test_bool_markers(self, engine, config_data):
        opts = ExportOptions.from_preset({
            "user_data/accessible_from_files_app": True,
            "capabilities/in_app_purchases": True,
        })
        text = "$docs_in_place\n$docs_sharing\n$in_app_purchases\n$push_notifications\n"
        assert _fix(engine, text, opts, config_data) == "<true/>\n<false/>\n1\n0\n"

    @pytest.mark.parametrize(
        "debug,expected",
        [(True, "development"), (False, "app-store")],
    )
    def test_export_method(self, engine, options, config_data, debug, expected):
        assert _fix(engine, "<string>$export_method</string>", options, config_data, debug) == (
            f"<string>{expected}</string>"
        )

    def test_sign_identities(self, engine, config_data):
        opts = ExportOptions.from_preset({"application/code_sign_identity_release": ""})
        text = "$code_sign_identity_debug\n$code_sign_identity_release"
        assert _fix(engine, text, opts, config_data) == "iPhone Developer\niPhone Distribution"

    def test_orientation_fragment(self, engine, config_data):
        """测试方向片段按固定顺序拼接"""
        opts = ExportOptions.from_preset({
            "orientation/portrait": False,
            "orientation/portrait_upside_down": True,
            "orientation/landscape_left": True,
            "orientation/landscape_right": False,
        })
        out = _fix(engine, "\t$interface_orientations\n", opts, config_data)
        assert out == (
            "\t<string>UIInterfaceOrientationLandscapeLeft</string>\n"
            "<string>UIInterfaceOrientationPortraitUpsideDown</string>\n"
        )

    def test_fragment_order_stable(self, engine, config_data):
        """测试选项字典顺序不同但取值相同时片段一致"""
        a = ExportOptions.from_preset({"orientation/portrait": True, "orientation/landscape_right": False})
        b = ExportOptions.from_preset({"orientation/landscape_right": False, "orientation/portrait": True})
        text = "$interface_orientations\n"
        assert _fix(engine, text, a, config_data) == _fix(engine, text, b, config_data)

    def test_device_capabilities(self, engine, config_data):
        opts = ExportOptions.from_preset({"capabilities/arkit": True})
        assert _fix(engine, "$required_device_capabilities\n", opts, config_data) == "<string>arkit</string>\n"
        assert _fix(engine, "\t$required_device_capabilities\n", ExportOptions(), config_data) == "\t\n"

    def test_modules_and_code(self, engine, options):
        data = IOSConfigData.build(options, "MyGame").with_module("camera", True, "FID", "GID")
        out = _fix(engine, "$modules_buildphase\n$cpp_code\n", options, data)
        assert out.startswith("GID /* libgodot_camera_module.a */,")


class TestAppend:
    """append 模式测试"""

    def test_append_xcconfig(self, engine, options, config_data):
        """测试追加构建设置"""
        out = engine.append_to_file(b"// base\n", options, config_data, False).decode("utf-8")
        lines = out.splitlines()

        assert lines[0] == "// base"
        assert "PRODUCT_BUNDLE_IDENTIFIER = com.example.game;" in lines
        assert "DEVELOPMENT_TEAM = ABC123;" in lines
        assert "ARCHS = arm64;" in lines
        assert "FRAMEWORK_SEARCH_PATHS = $(inherited) MyGame;" in lines
        assert "OTHER_LDFLAGS = $(inherited) $(GODOT_DEFAULT_LDFLAGS) ;" in lines
        assert lines[-2:] == ["GODOT_BUILD_NUMBER = 1;", "GODOT_VERSION_NAME = 1.0.0;"]
        assert not any("CODE_SIGN_ENTITLEMENTS" in line for line in lines)

    def test_append_push_entitlements(self, engine, config_data):
        opts = ExportOptions.from_preset({"capabilities/push_notifications": True})
        out = engine.append_to_file(b"", opts, config_data, True).decode("utf-8")
        assert "CODE_SIGN_ENTITLEMENTS[config=Debug][sdk=iphoneos*] = MyGame/MyGame.entitlements;\n" in out

    def test_append_adds_missing_newline(self, engine, options, config_data):
        out = engine.append_to_file(b"A = 1;", options, config_data, False).decode("utf-8")
        assert out.startswith("A = 1;\nPRODUCT_BUNDLE_IDENTIFIER")
