"""Tests for reference extraction."""

from deptrace.analyzer import ReferenceExtractor
from deptrace.models import FileKind


def test_static_imports():
    """Test default, named, namespace and side-effect imports."""
    content = """
import React from 'react';
import { a, b } from './utils';
import * as api from "@/services/api";
import Default, { named } from '../shared';
import './styles.less';
"""
    refs = ReferenceExtractor.analyze_javascript(content)

    assert refs == ["react", "./utils", "@/services/api", "../shared", "./styles.less"]


def test_require_and_dynamic_import():
    """Test CommonJS require and dynamic import()."""
    content = """
const fs = require('fs');
const helper = require("./helper");
const page = import('./pages/Home');
"""
    refs = ReferenceExtractor.analyze_javascript(content)

    assert "fs" in refs
    assert "./helper" in refs
    assert "./pages/Home" in refs


def test_lazy_import_reported_twice():
    """A lazy() wrapper is matched both as dynamic and as lazy import."""
    content = "const Page = lazy(() => import(/* webpackChunkName: 'page' */ './Page'));"
    refs = ReferenceExtractor.analyze_javascript(content)

    assert refs == ["./Page", "./Page"]


def test_stylesheet_references():
    """Test @import and url() in stylesheets."""
    content = """
@import './variables.less';
@import "~antd/lib/style";
.logo { background: url('./logo.png'); }
"""
    refs = ReferenceExtractor.analyze_stylesheet(content)

    assert refs == ["./variables.less", "~antd/lib/style", "./logo.png"]


def test_extract_dispatches_on_kind():
    """Code patterns are not applied to stylesheets and vice versa."""
    extractor = ReferenceExtractor()
    style = "@import './a.less';\n.x { background: url('./x.png'); }"
    code = "const b = require('./b');"

    assert extractor.extract(style, FileKind.STYLE) == ["./a.less", "./x.png"]
    assert extractor.extract(code, FileKind.STYLE) == []
    assert extractor.extract(code, FileKind.CODE) == ["./b"]


def test_no_references():
    """Test content without any references."""
    assert ReferenceExtractor().extract("const x = 1;\n", FileKind.CODE) == []
