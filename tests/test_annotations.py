"""Tests for the runtime behaviour of the class decorators."""

import pytest
import sitemap_codegen.annotations
from sitemap_codegen.annotations import ChangeFreq, sitemap_url


def test_decorators_attach_metadata_and_return_class():
    @sitemap_codegen.annotations.route("/products/{id}")
    @sitemap_url(ChangeFreq.WEEKLY, 0.8)
    class ProductPage:
        pass

    assert ProductPage.__name__ == "ProductPage"
    assert ProductPage.__route__ == "/products/{id}"
    assert ProductPage.__sitemap_url__ == (ChangeFreq.WEEKLY, 0.8)


def test_sitemap_url_defaults():
    @sitemap_url()
    class Page:
        pass

    assert Page.__sitemap_url__ == (ChangeFreq.ALWAYS, 0.5)


def test_bare_sitemap_url_keeps_the_class():
    @sitemap_url
    class Page:
        pass

    assert isinstance(Page, type)
    assert Page.__sitemap_url__ == (ChangeFreq.ALWAYS, 0.5)


def test_route_requires_string_template():
    with pytest.raises(TypeError):
        sitemap_codegen.annotations.route(42)


def test_change_freq_ordinals():
    assert [int(freq) for freq in ChangeFreq] == list(range(7))
    assert ChangeFreq.ALWAYS == 0
    assert ChangeFreq.NEVER == 6
