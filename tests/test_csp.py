from ampsmith.core.csp import NONE, SELF, CSPBuilder, Directive, hash_source


FOO_HASH = "'sha256-WOdSzz11/3cpqOdrm89LBL2UPwEU9EhbDtMy2OciEhs='"


def test_hash_source_matches_browser_digest() -> None:
    assert hash_source("alert('foo');") == FOO_HASH
    assert hash_source(b"alert('foo');") == FOO_HASH


def test_directives_serialised_in_fixed_order() -> None:
    csp = CSPBuilder()
    csp.add_source(Directive.IMG, SELF)
    csp.add_source(Directive.SCRIPT, "https://cdn.example.org")
    csp.add_source(Directive.DEFAULT, NONE)

    assert csp.finish() == (
        "default-src 'none'; img-src 'self'; script-src https://cdn.example.org"
    )


def test_child_sources_are_mirrored_to_frames() -> None:
    csp = CSPBuilder()
    csp.add_source(Directive.CHILD, SELF)

    assert csp.sources(Directive.FRAME) == (SELF,)
    assert csp.finish() == "child-src 'self'; frame-src 'self'"


def test_hashes_enable_unsafe_inline_fallback() -> None:
    csp = CSPBuilder()
    csp.add_source(Directive.DEFAULT, NONE)
    source = csp.add_hash(Directive.SCRIPT, "alert('foo');")

    assert source == FOO_HASH
    assert csp.finish() == f"default-src 'none'; script-src {FOO_HASH} 'unsafe-inline'"
    assert csp.hash_count() == 1


def test_duplicate_sources_are_ignored() -> None:
    csp = CSPBuilder()
    csp.add_hash(Directive.STYLE, "body{}")
    csp.add_hash(Directive.STYLE, "body{}")
    csp.add_source("style-src", SELF)

    assert csp.sources(Directive.STYLE) == (hash_source("body{}"), SELF)
    assert csp.hash_count() == 1


def test_empty_policy() -> None:
    assert CSPBuilder().finish() == ""


def test_meta_tag_wraps_policy() -> None:
    csp = CSPBuilder()
    csp.add_source(Directive.DEFAULT, NONE)

    assert csp.meta_tag() == (
        '<meta http-equiv="Content-Security-Policy" content="default-src \'none\'">'
    )
