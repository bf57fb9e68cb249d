import pytest

from icfs.fs.inode import InodesRegistry

from helpers import p


def test_inode_registry1():
    reg = InodesRegistry()

    assert InodesRegistry.ROOT_INODE == 1
    assert reg.get_path(1) == ()
    assert reg.get_inode(()) == 1

    dir1 = reg.bind(p("/dir1"))
    file1 = reg.bind(p("/dir1/file1.txt"))
    file2 = reg.bind(p("/dir1/file2.txt"))

    assert (dir1, file1, file2) == (2, 3, 4)

    assert reg.bind(p("/dir1")) == dir1
    assert reg.get_path(file1) == p("/dir1/file1.txt")
    assert reg.get_inode(p("/dir1/file2.txt")) == file2
    assert reg.bind(p("/dir2")) == 5

    assert reg.get_path(100) is None
    assert reg.get_inode(p("/nope")) is None


def test_forget_drains_lookup_count():
    reg = InodesRegistry()
    inode = reg.bind(p("/a"))

    reg.acquire(inode)
    reg.acquire(inode, 2)

    assert reg.lookup_count(inode) == 3

    assert reg.forget(inode, 1) is False
    assert reg.lookup_count(inode) == 2
    assert reg.is_bound(inode)

    assert reg.forget(inode, 2) is True
    assert not reg.is_bound(inode)
    assert reg.get_inode(p("/a")) is None
    assert reg.free_inodes == {inode}


def test_recycled_inodes_are_reused_first():
    reg = InodesRegistry()

    a = reg.bind(p("/a"))
    b = reg.bind(p("/b"))
    c = reg.bind(p("/c"))

    for inode in (c, a):
        reg.acquire(inode)
        reg.forget(inode, 1)

    assert reg.bind(p("/d")) == a
    assert reg.bind(p("/e")) == c
    assert reg.bind(p("/f")) == 5

    # the recycled number never resolves to the forgotten path
    assert reg.get_path(a) == p("/d")
    assert reg.get_inode(p("/a")) is None
    assert reg.get_path(b) == p("/b")


def test_forget_unknown_and_root_is_ignored():
    reg = InodesRegistry()

    assert reg.forget(42, 1) is False
    assert reg.forget(InodesRegistry.ROOT_INODE, 10) is False

    assert reg.get_path(InodesRegistry.ROOT_INODE) == ()
    assert reg.free_inodes == frozenset()


def test_move_rebinds_subtree():
    reg = InodesRegistry()

    d = reg.bind(p("/d"))
    f = reg.bind(p("/d/f"))
    g = reg.bind(p("/d/sub/g"))
    other = reg.bind(p("/dd"))

    reg.move(p("/d"), p("/x/e"))

    assert reg.get_path(d) == p("/x/e")
    assert reg.get_path(f) == p("/x/e/f")
    assert reg.get_path(g) == p("/x/e/sub/g")
    assert reg.get_path(other) == p("/dd")

    assert reg.get_inode(p("/d")) is None
    assert reg.get_inode(p("/d/f")) is None
    assert reg.get_inode(p("/x/e/f")) == f


def test_detach_orphans_referenced_inodes():
    reg = InodesRegistry()

    d = reg.bind(p("/d"))
    f = reg.bind(p("/d/f"))
    unreferenced = reg.bind(p("/d/g"))

    reg.acquire(d)
    reg.acquire(f, 2)

    assert sorted(reg.detach(p("/d"))) == [d, f, unreferenced]

    # nobody holds it, so it is free right away
    assert reg.free_inodes == {unreferenced}

    # still reserved but resolving to nothing
    assert reg.get_path(d) is None
    assert reg.get_path(f) is None
    assert reg.lookup_count(f) == 2
    assert not reg.is_bound(f)
    assert reg.get_inode(p("/d/f")) is None

    # a new entry at the same place gets a different inode
    new_f = reg.bind(p("/d/f"))
    assert new_f not in (d, f)

    assert reg.forget(f, 1) is False
    assert reg.forget(f, 1) is True
    assert f in reg.free_inodes
    assert reg.get_path(new_f) == p("/d/f")


def test_detach_root_is_refused():
    reg = InodesRegistry()

    with pytest.raises(ValueError):
        reg.detach(())
