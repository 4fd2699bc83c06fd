from __future__ import annotations

import pytest

from pdfsuite.core.config import Settings
from pdfsuite.core.exceptions import ValidationError
from pdfsuite.tools.common.options import (
    DEFAULT_OPTIONS,
    AnnotationOptions,
    ChangePasswordOptions,
    HeaderFooterOptions,
    NUpOptions,
    OptionsBag,
    ProtectOptions,
    QrOptions,
    ReorderOptions,
    RotateOptions,
    SplitBySizeOptions,
    WatermarkOptions,
)


def test_options_bag_merges_over_defaults() -> None:
    bag = OptionsBag({"rotation": 180})
    assert bag["rotation"] == 180
    assert bag["rotateMode"] == DEFAULT_OPTIONS["rotateMode"]
    assert bag.overrides() == {"rotation": 180}


def test_options_bag_coerces_strings() -> None:
    bag = OptionsBag(
        {
            "rotation": "270",
            "qrIncludeText": "false",
            "contrastFactor": "2.5",
            "pageOrder": "3,1,2",
        }
    )
    assert bag["rotation"] == 270
    assert bag["qrIncludeText"] is False
    assert bag["contrastFactor"] == 2.5
    assert bag["pageOrder"] == [3, 1, 2]


def test_options_bag_rejects_uncoercible_values() -> None:
    with pytest.raises(ValidationError):
        OptionsBag({"nUp": "many"})
    with pytest.raises(ValidationError):
        OptionsBag({"removeMetadata": "perhaps"})


@pytest.mark.parametrize(
    "values",
    [{"rotation": 45}, {"watermarkOpacity": 150}, {"printBleed": -1}],
)
def test_options_bag_validates_ranges(values) -> None:
    with pytest.raises(ValidationError):
        OptionsBag(values)


def test_patch_validates_and_leaves_original_untouched() -> None:
    bag = OptionsBag()
    patched = bag.patch(rotation=90 * 3)
    assert patched["rotation"] == 270
    assert bag["rotation"] == 90
    with pytest.raises(ValidationError):
        bag.patch(rotation=100)


def test_protect_options_enforce_minimum_length() -> None:
    settings = Settings()
    with pytest.raises(ValidationError, match="at least 6 characters"):
        ProtectOptions.from_bag(OptionsBag({"password": "abc"}), settings)
    assert ProtectOptions.from_bag(OptionsBag({"password": "abcdef"}), settings).password == "abcdef"


def test_minimum_password_length_comes_from_settings() -> None:
    settings = Settings(min_password_length=3)
    assert ProtectOptions.from_bag(OptionsBag({"password": "abc"}), settings).password == "abc"


def test_change_password_falls_back_to_password_option() -> None:
    options = ChangePasswordOptions.from_bag(OptionsBag({"password": "old-one", "newPassword": "new-one"}), Settings())
    assert (options.old_password, options.new_password) == ("old-one", "new-one")
    with pytest.raises(ValidationError):
        ChangePasswordOptions.from_bag(OptionsBag({"newPassword": "new-one"}), Settings())


def test_rotate_options_choice() -> None:
    options = RotateOptions.from_bag(OptionsBag({"rotateMode": "specific", "pages": "2,4"}), Settings())
    assert (options.angle, options.mode, options.pages) == (90, "specific", "2,4")
    with pytest.raises(ValidationError):
        RotateOptions.from_bag(OptionsBag({"rotateMode": "odd"}), Settings())


def test_split_by_size_in_bytes() -> None:
    options = SplitBySizeOptions.from_bag(OptionsBag({"splitSize": "0.5"}), Settings())
    assert options.max_bytes == 512 * 1024
    with pytest.raises(ValidationError):
        SplitBySizeOptions.from_bag(OptionsBag({"splitSize": 0}), Settings())


def test_reorder_options_accept_json_text() -> None:
    options = ReorderOptions.from_bag(OptionsBag({"pageOrder": "[2, 1]"}), Settings())
    assert options.page_order == (2, 1)


def test_nup_options_restrict_sheet_layouts() -> None:
    assert NUpOptions.from_bag(OptionsBag({"nUp": 4}), Settings()).per_sheet == 4
    with pytest.raises(ValidationError):
        NUpOptions.from_bag(OptionsBag({"nUp": 3}), Settings())


def test_watermark_options_scale_opacity_and_parse_color() -> None:
    options = WatermarkOptions.from_bag(
        OptionsBag({"watermarkOpacity": 50, "watermarkColor": "#ff0000"}), Settings()
    )
    assert options.opacity == 0.5
    assert options.color == (1.0, 0.0, 0.0)
    with pytest.raises(ValidationError):
        WatermarkOptions.from_bag(OptionsBag({"watermarkText": "  "}), Settings())


def test_header_footer_requires_some_text() -> None:
    with pytest.raises(ValidationError):
        HeaderFooterOptions.from_bag(OptionsBag(), Settings())
    assert HeaderFooterOptions.from_bag(OptionsBag({"footerText": "Draft"}), Settings()).footer == "Draft"


def test_qr_options_require_text() -> None:
    with pytest.raises(ValidationError):
        QrOptions.from_bag(OptionsBag(), Settings())
    options = QrOptions.from_bag(OptionsBag({"qrText": "https://example.com", "qrErrorCorrection": "M"}), Settings())
    assert options.error_correction == "M"


def test_annotation_options_parse_json() -> None:
    options = AnnotationOptions.from_bag(OptionsBag({"annotations": '[{"type": "text"}]'}), Settings())
    assert options.annotations == ({"type": "text"},)
    with pytest.raises(ValidationError):
        AnnotationOptions.from_bag(OptionsBag({"annotations": "{not json"}), Settings())
