"""Tests for creating environments and keeping them in the stack."""

import os
import re

import pytest

from stackenvs import (
    EnvironmentExistsError,
    ExternalToolError,
    NotFoundError,
    StackEnv,
    ValidationError,
    activate_env,
    add_missing,
    create_env,
    dir_path,
    ensure_in_stack,
    env_exists,
    in_stack,
    list_envs,
    read_env,
    remove_env_dir,
    remove_from_stack,
    resolve_stack,
    update_env,
)


class TestQueries:
    """exists, in_stack and dir_path before anything is created."""

    def test_not_materialized(self, pkg, stack):
        env = StackEnv(name="tmpenv123", packages=["Example"], shared=True)
        assert not env_exists(env, pkg=pkg)
        assert not env_exists("tmpenv123", pkg=pkg)
        assert not in_stack(env, stack=stack)
        assert not in_stack("tmpenv123", stack=stack)

    def test_shared_dir_path(self, pkg):
        env = StackEnv(name="tools", shared=True)
        assert dir_path(env, pkg=pkg) == pkg.environments_root() / "tools"
        assert dir_path("@tools", pkg=pkg) == pkg.environments_root() / "tools"

    def test_relative_dir_path(self, pkg, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert dir_path("envs/x", shared=False, pkg=pkg) == tmp_path / "envs" / "x"

    def test_home_dir_path(self, pkg, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        env = StackEnv(name="~/envs/x")
        assert dir_path(env, pkg=pkg) == tmp_path / "envs" / "x"

    def test_default_version_envs_do_not_exist(self, pkg):
        (pkg.environments_root() / "v3.12").mkdir(parents=True)
        assert not env_exists("v3.12", pkg=pkg)

    def test_unshared_exists_checks_directory(self, pkg, tmp_path):
        env = StackEnv(name=str(tmp_path / "local"))
        assert not env_exists(env, pkg=pkg)
        (tmp_path / "local").mkdir()
        assert env_exists(env, pkg=pkg)


class TestEnsureInStack:
    """The create, top up and push protocol."""

    def test_scenario(self, pkg, stack, installer):
        d = StackEnv.make("tmpenv123", ["Example"], shared=True, pkg=pkg)
        assert not env_exists(d, pkg=pkg)

        assert ensure_in_stack(d, stack=stack, pkg=pkg) is d
        assert env_exists(d, pkg=pkg)
        assert in_stack(d, stack=stack)
        assert set(read_env(d, pkg=pkg)) == {"Example"}
        assert stack.count("@tmpenv123") == 1

        d = d.with_packages("Other")
        ensure_in_stack(d, stack=stack, pkg=pkg)
        assert set(read_env(d, pkg=pkg)) == {"Example", "Other"}
        assert stack.count("@tmpenv123") == 1
        assert installer.installed == ["Example", "Other"]

        remove_from_stack(d, stack=stack)
        assert "@tmpenv123" not in stack
        assert set(read_env(d, pkg=pkg)) == {"Example", "Other"}

    def test_repeat_is_a_no_op(self, pkg, stack, installer):
        env = StackEnv(name="again", packages=["Example"], shared=True)
        ensure_in_stack(env, stack=stack, pkg=pkg)
        ensure_in_stack(env, stack=stack, pkg=pkg)

        assert installer.installed == ["Example"]
        assert read_env(env, pkg=pkg) == {"Example": "1.0"}
        assert stack.count("@again") == 1

    @pytest.mark.parametrize("name", ["foo/", "./foo", "v3.12"])
    def test_unstable_shared_names_are_rejected(self, pkg, stack, installer, name):
        before = list(stack)
        with pytest.raises(ValidationError):
            ensure_in_stack(name, ["Example"], stack=stack, pkg=pkg)
        assert installer.installed == []
        assert not pkg.environments_root().exists()
        assert stack == before

    def test_no_removals(self, pkg, stack):
        ensure_in_stack(StackEnv(name="keep", packages=["A", "B"], shared=True), stack=stack, pkg=pkg)
        ensure_in_stack(StackEnv(name="keep", packages=["C"], shared=True), stack=stack, pkg=pkg)
        assert set(read_env("keep", pkg=pkg)) == {"A", "B", "C"}

    def test_returned_descriptor_is_not_merged(self, pkg, stack):
        ensure_in_stack(StackEnv(name="merge", packages=["A", "B"], shared=True), stack=stack, pkg=pkg)
        env = ensure_in_stack(StackEnv(name="merge", packages=["C"], shared=True), stack=stack, pkg=pkg)
        assert env.packages == ("C",)

    def test_empty_environment_is_materialized(self, pkg, stack):
        env = ensure_in_stack(StackEnv(name="empty", shared=True), stack=stack, pkg=pkg)
        assert env_exists(env, pkg=pkg)
        assert read_env(env, pkg=pkg) == {}
        assert in_stack(env, stack=stack)

    def test_from_name(self, pkg, stack):
        env = ensure_in_stack("@named", ["Example"], stack=stack, pkg=pkg)
        assert env == StackEnv(name="named", packages=("Example",), shared=True)
        assert in_stack("named", stack=stack)

    def test_from_name_infers_packages(self, pkg, stack):
        ensure_in_stack("named", ["Example"], stack=stack, pkg=pkg)
        env = ensure_in_stack("named", stack=stack, pkg=pkg)
        assert env.packages == ("Example",)

    def test_unshared_environment(self, pkg, stack, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        env = StackEnv(name="local_env", packages=["Example"])
        ensure_in_stack(env, stack=stack, pkg=pkg)

        assert (tmp_path / "local_env").is_dir()
        assert stack[-1] == "local_env"
        assert tmp_path / "local_env" / "site-packages" in resolve_stack(stack, pkg)

    def test_failure_restores_active_environment(self, pkg, stack, installer):
        installer.fail_on = {"Broken"}
        previous = pkg.activate("previous", shared=True)

        env = StackEnv(name="partial", packages=["Good", "Broken", "Later"], shared=True)
        with pytest.raises(ExternalToolError):
            ensure_in_stack(env, stack=stack, pkg=pkg)

        assert pkg.current_active_context() == previous
        # no rollback: what was added before the failure stays
        assert set(read_env(env, pkg=pkg)) == {"Good"}
        assert installer.installed == ["Good"]
        assert not in_stack(env, stack=stack)


class TestEnvironmentOperations:
    """create_env, update_env, add_missing and friends."""

    def test_create_env(self, pkg):
        env = create_env("fresh", ["Example"], pkg=pkg)
        assert env_exists(env, pkg=pkg)
        with pytest.raises(EnvironmentExistsError):
            create_env(env, pkg=pkg)

    def test_update_env_adds_everything_again(self, pkg, installer):
        env = update_env("upd", ["Example"], pkg=pkg)
        update_env(env, pkg=pkg)
        assert installer.installed == ["Example", "Example"]
        assert set(read_env(env, pkg=pkg)) == {"Example"}

    def test_add_missing(self, pkg, installer):
        env = update_env("miss", ["A"], pkg=pkg)
        assert add_missing(env.with_packages("B", "C"), pkg=pkg) == ["B", "C"]
        assert add_missing(env.with_packages("B", "C"), pkg=pkg) == []
        assert installer.installed == ["A", "B", "C"]

    def test_add_missing_needs_existing_env(self, pkg, installer):
        assert add_missing(StackEnv(name="ghost", packages=["A"], shared=True), pkg=pkg) == []
        assert installer.installed == []

    def test_activate_env(self, pkg):
        env = create_env("act", [], pkg=pkg)
        assert activate_env(env, pkg=pkg) == pkg.environments_root() / "act"
        assert pkg.current_active_context() == pkg.environments_root() / "act"

    def test_remove_env_dir(self, pkg, stack):
        env = ensure_in_stack("gone", ["Example"], stack=stack, pkg=pkg)
        remove_env_dir(env, pkg=pkg)

        assert not env_exists(env, pkg=pkg)
        assert in_stack(env, stack=stack)
        with pytest.raises(NotFoundError):
            remove_env_dir(env, pkg=pkg)


class TestRemoveFromStack:
    """Removal drops every occurrence and never fails."""

    def test_removes_all_occurrences(self, stack):
        stack.extend(["@dup", "other", "@dup"])
        assert remove_from_stack("dup", stack=stack) == 2
        assert stack.count("@dup") == 0
        assert "other" in stack

    def test_absent_is_a_no_op(self, stack):
        before = list(stack)
        assert remove_from_stack(StackEnv(name="nothere", shared=True), stack=stack) == 0
        assert remove_from_stack(StackEnv(name="nothere", shared=True), stack=stack) == 0
        assert stack == before

    def test_unshared_uses_bare_entry(self, stack):
        stack.extend(["@path/env", "path/env"])
        remove_from_stack(StackEnv(name="path/env"), stack=stack)
        assert stack[-1] == "@path/env"


class TestListEnvs:
    """Listing shared environments."""

    @pytest.fixture
    def populated(self, pkg):
        root = pkg.environments_root()
        for name in ("beta", "alpha", "v3.12", "v1.10"):
            (root / name).mkdir(parents=True)
        (root / "notes.txt").write_text("not an environment")
        return pkg

    def test_defaults_are_excluded(self, populated):
        assert list_envs(pkg=populated) == ["alpha", "beta"]

    def test_include_defaults(self, populated):
        assert list_envs(include_defaults=True, pkg=populated) == ["alpha", "beta", "v1.10", "v3.12"]

    def test_substring_filter(self, populated):
        assert list_envs("lph", pkg=populated) == ["alpha"]

    def test_regex_filter(self, populated):
        assert list_envs(re.compile(r"^b"), pkg=populated) == ["beta"]
        assert list_envs(re.compile(r"^v"), include_defaults=True, pkg=populated) == ["v1.10", "v3.12"]

    def test_missing_root(self, pkg):
        assert not os.path.exists(pkg.environments_root())
        assert list_envs(pkg=pkg) == []
