"""設定管理のテスト。"""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import yaml

from symmap.config import Config


class TestConfigDefaults:
    """Configデータクラスのテスト。"""

    def test_default_values(self):
        """デフォルト値のテスト。"""
        config = Config()
        assert config.headers == []
        assert config.sym_map == {}
        assert config.name_style == "none"
        assert config.receiver_check is False
        assert config.output == "llcppg.symb.json"


class TestConfigLoading:
    """設定ファイル読み込みのテスト。"""

    def test_load_llcppg_cfg(self, fixtures_dir):
        """JSON形式のllcppg.cfgを読み込める。"""
        config = Config.from_yaml(str(fixtures_dir / "c" / "llcppg.cfg"))

        assert config.name == "c"
        assert config.headers == ["c.h"]
        assert config.include_paths == ["."]
        assert config.sym_map["Foo_Print"] == ".Print"
        assert config.receiver_check is True
        assert Path(config.base_dir) == (fixtures_dir / "c").resolve()

    def test_cflags_split(self):
        """cflagsはインクルードパスとコンパイラ引数に振り分けられる。"""
        config = Config.from_dict({"cflags": "-I/usr/include/foo -DFOO=1 -I bar -std=c99"})

        assert config.include_paths == ["/usr/include/foo", "bar"]
        assert config.compiler_args == ["-DFOO=1", "-std=c99"]

    def test_include_as_string(self):
        """スペース区切りのincludeはリストに変換される。"""
        config = Config.from_dict({"include": "a.h b.h"})
        assert config.headers == ["a.h", "b.h"]

    def test_cflags_merged_with_include_paths(self):
        """cflagsのインクルードパスはキーの順序に関係なくinclude_pathsに追加される。"""
        before = Config.from_dict({"cflags": "-Ifrom_cflags", "include_paths": ["explicit"]})
        after = Config.from_dict({"include_paths": ["explicit"], "cflags": "-Ifrom_cflags"})

        assert before.include_paths == ["explicit", "from_cflags"]
        assert after.include_paths == ["explicit", "from_cflags"]

    def test_cflags_do_not_modify_input(self):
        """入力辞書のリストは変更されない。"""
        include_paths = ["explicit"]
        config = Config.from_dict({"include_paths": include_paths, "cflags": "-Iother"})

        assert include_paths == ["explicit"]
        assert config.include_paths is not include_paths

    def test_libs_loaded(self):
        """libsはリンク対象ライブラリとして読み込まれる。"""
        config = Config.from_dict({"libs": "-L/opt/lib -lfoo"})
        assert config.libs == "-L/opt/lib -lfoo"
        assert config.to_dict()["libs"] == "-L/opt/lib -lfoo"

    def test_unknown_keys_ignored(self):
        """未知のキーは無視される。"""
        config = Config.from_dict({"deps": ["c/os"], "KEY_ALIASES": {}})
        assert config.KEY_ALIASES["include"] == "headers"
        assert not hasattr(config, "deps")

    def test_load_yaml(self):
        """YAML形式の設定を読み込める。"""
        with TemporaryDirectory() as tmpdir:
            cfg = Path(tmpdir) / "symmap.yaml"
            cfg.write_text(
                "headers: [foo.h]\n"
                "trim_prefixes: [foo_]\n"
                "name_style: camel\n"
                "rules:\n"
                "  - {match: foo_new, directive: keep_function}\n",
                encoding="utf-8"
            )
            config = Config.from_yaml(str(cfg))

            assert config.trim_prefixes == ["foo_"]
            assert config.name_style == "camel"
            assert config.rules[0]["match"] == "foo_new"


class TestConfigValidation:
    """設定検証のテスト。"""

    def test_valid_fixture(self, fixtures_dir):
        """フィクスチャ設定は検証を通過する。"""
        config = Config.from_yaml(str(fixtures_dir / "c" / "llcppg.cfg"))
        assert config.validate() == []

    def test_missing_headers(self):
        """ヘッダー未指定はエラーになる。"""
        errors = Config().validate()
        assert any("headers" in e for e in errors)

    def test_invalid_name_style(self):
        """未知のname_styleはエラーになる。"""
        config = Config.from_dict({"name_style": "kebab"})
        assert any("name_style" in e for e in config.validate())

    def test_header_found_via_include_path(self):
        """ヘッダーはインクルードパスからも検索される。"""
        with TemporaryDirectory() as tmpdir:
            inc = Path(tmpdir) / "include"
            inc.mkdir()
            (inc / "foo.h").write_text("void foo_init(void);")

            config = Config.from_dict({
                "include": ["foo.h"],
                "cflags": f"-I{inc}",
                "base_dir": tmpdir,
            })

            assert config.validate() == []
            assert config.get_header_files() == [str((inc / "foo.h").resolve())]

    def test_missing_rules_source(self):
        """存在しないルールソースはエラーになる。"""
        with TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "foo.h").write_text("")
            config = Config.from_dict({
                "headers": ["foo.h"],
                "rules_source": {"type": "yaml", "path": "rules.yaml"},
                "base_dir": tmpdir,
            })
            assert any("Rules source" in e for e in config.validate())


class TestConfigSave:
    """設定保存のテスト。"""

    def test_save_and_reload(self):
        """保存した設定を再読み込みできる。"""
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "out" / "config.yaml"
            config = Config.from_dict({
                "include": ["c.h"],
                "symMap": {"Foo_Print": ".Print"},
                "trimPrefixes": ["Foo_"],
            })
            config.save_yaml(str(path))

            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            assert "report" not in data

            reloaded = Config.from_yaml(str(path))
            assert reloaded.headers == ["c.h"]
            assert reloaded.sym_map == {"Foo_Print": ".Print"}
            assert reloaded.trim_prefixes == ["Foo_"]

    def test_to_dict_is_json_serializable(self):
        """to_dictの結果はJSONに変換できる。"""
        json.dumps(Config().to_dict())
