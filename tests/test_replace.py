import pytest

from earthpin.models import LineRange, PackageDependency
from earthpin.utils.dependency import get_dep
from earthpin.utils.replace import (
    DEP_NAME_TEMPLATE,
    get_auto_replace_template,
    process_dep_for_auto_replace,
    render_template,
)


def test_get_auto_replace_template_without_digest():
    dep = PackageDependency(current_value="3.18", replace_string="ARG TAG=3.18\n")

    assert get_auto_replace_template(dep) == (
        "ARG TAG={{#if newValue}}{{newValue}}{{/if}}{{#if newDigest}}@{{newDigest}}{{/if}}\n"
    )


def test_get_auto_replace_template_with_digest():
    dep = PackageDependency(
        current_value="3.18",
        current_digest="sha256:abc",
        replace_string="alpine:3.18@sha256:abc",
    )

    assert get_auto_replace_template(dep) == (
        "alpine:{{#if newValue}}{{newValue}}{{/if}}{{#if newDigest}}@{{newDigest}}{{/if}}"
    )


def test_get_auto_replace_template_digest_without_at():
    dep = PackageDependency(current_digest="sha256:abc", replace_string="ARG DIGEST=sha256:abc")

    assert get_auto_replace_template(dep) == "ARG DIGEST={{#if newDigest}}{{newDigest}}{{/if}}"


def test_render_template():
    dep = PackageDependency(dep_name="busybox", package_name="amd64/busybox")
    template = "{{packageName}}{{#if newValue}}:{{newValue}}{{/if}}{{#if newDigest}}@{{newDigest}}{{/if}}"

    assert render_template(template, dep, "1.3") == "amd64/busybox:1.3"
    assert render_template(template, dep, "1.3", "sha256:def") == "amd64/busybox:1.3@sha256:def"
    assert render_template(template, dep) == "amd64/busybox"


@pytest.mark.parametrize(
    "image",
    [
        "alpine",
        "alpine:3.18",
        "alpine:3.18@sha256:abc",
        "amd64/busybox:1.2",
        "quay.io:443/org/app:1.0",
    ],
)
def test_template_round_trip(image):
    dep = get_dep(image)

    rendered = render_template(
        dep.auto_replace_string_template,
        dep,
        dep.current_value,
        dep.current_digest,
    )
    assert rendered == dep.replace_string


def test_single_range_is_left_alone():
    dep = get_dep("alpine:3.18")

    process_dep_for_auto_replace(dep, [LineRange(0, 0)], ["FROM alpine:3.18"], "\n")

    assert dep.replace_string == "alpine:3.18"


def test_span_covers_declaration_holding_the_value():
    lines = ["ARG TAG=3.18", "FROM alpine:$TAG", ""]
    dep = get_dep("alpine:3.18")

    process_dep_for_auto_replace(dep, [LineRange(1, 1), LineRange(0, 0)], lines, "\n")

    assert dep.replace_string == "ARG TAG=3.18\n"
    assert render_template(dep.auto_replace_string_template, dep, "3.19") == "ARG TAG=3.19\n"


def test_span_joins_every_line_between_contributing_ranges():
    lines = ["ARG DIGEST=sha256:abc", "ARG TAG=3.18", "RUN true", "FROM alpine:$TAG@$DIGEST"]
    dep = get_dep("alpine:3.18@sha256:abc")

    process_dep_for_auto_replace(
        dep,
        [LineRange(3, 3), LineRange(1, 1), LineRange(0, 0)],
        lines,
        "\r\n",
    )

    assert dep.replace_string == "ARG DIGEST=sha256:abc\r\nARG TAG=3.18"
    assert render_template(dep.auto_replace_string_template, dep, "3.19", "sha256:def") == (
        "ARG DIGEST=sha256:def\r\nARG TAG=3.19"
    )


def test_span_in_file_without_final_newline():
    lines = ["ARG TAG=3.18", "FROM alpine:$TAG"]
    dep = get_dep("alpine:3.18")

    process_dep_for_auto_replace(dep, [LineRange(1, 1), LineRange(0, 0)], lines, "\n")

    assert dep.replace_string == "ARG TAG=3.18\n"


def test_span_without_value_keeps_declared_image():
    lines = ["ARG IMAGE=alpine", "FROM $IMAGE"]
    dep = get_dep("alpine")

    process_dep_for_auto_replace(dep, [LineRange(1, 1), LineRange(0, 0)], lines, "\n")

    assert dep.replace_string == "alpine"
    assert dep.auto_replace_string_template == DEP_NAME_TEMPLATE
    assert render_template(dep.auto_replace_string_template, dep, "3.19") == "alpine:3.19"


def test_span_without_value_or_verbatim_image_uses_every_range():
    lines = ["ARG REGISTRY=ghcr.io", "FROM $REGISTRY/app"]
    dep = get_dep("ghcr.io/app")

    process_dep_for_auto_replace(dep, [LineRange(1, 1), LineRange(0, 0)], lines, "\n")

    assert dep.replace_string == "ARG REGISTRY=ghcr.io\nFROM $REGISTRY/app"
    assert dep.auto_replace_string_template == dep.replace_string


def test_value_inside_variable_name_is_not_templated():
    lines = ["ARG V18=18", "FROM node:$V18", ""]
    dep = get_dep("node:18")

    process_dep_for_auto_replace(dep, [LineRange(1, 1), LineRange(0, 0)], lines, "\n")

    assert dep.replace_string == "ARG V18=18\n"
    assert render_template(dep.auto_replace_string_template, dep, "20") == "ARG V18=20\n"
