"""Framework signature tables.

Each table maps a framework name to categories of package patterns whose
presence identifies that framework. A pattern is an exact package name or
contains ``*`` wildcards. Declaration order matters: the first detected
framework from an ecosystem's primary-eligible set becomes its primary.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .parsers.base import Ecosystem

SignatureMap = Dict[str, Dict[str, List[str]]]

NPM_FRAMEWORK_SIGNATURES: SignatureMap = {
    "react": {
        "core": ["react", "react-dom"],
        "routing": ["react-router", "react-router-dom", "@tanstack/react-router"],
        "state": ["zustand", "jotai", "redux", "@reduxjs/toolkit"],
        "query": ["@tanstack/react-query", "swr"],
        "forms": ["react-hook-form", "formik"],
        "ui": ["@mui/material", "@chakra-ui/react", "@radix-ui/react-*", "@headlessui/react"],
        "metaFrameworks": ["next", "remix", "gatsby"],
    },
    "vue": {
        "core": ["vue"],
        "routing": ["vue-router"],
        "state": ["pinia", "vuex"],
        "ecosystem": ["@vue/*", "vueuse"],
        "ui": ["vuetify", "element-plus", "@vueuse/core"],
        "metaFrameworks": ["nuxt"],
    },
    "angular": {
        "core": ["@angular/core", "@angular/common", "@angular/platform-browser"],
        "routing": ["@angular/router"],
        "forms": ["@angular/forms"],
        "http": ["@angular/common/http"],
        "state": ["@ngrx/*", "@ngxs/*"],
        "ui": ["@angular/material", "@ng-bootstrap/ng-bootstrap"],
        "cli": ["@angular/cli", "@angular-devkit/*"],
    },
    "svelte": {
        "core": ["svelte"],
        "metaFrameworks": ["@sveltejs/kit"],
    },
    "testing": {
        "frameworks": ["jest", "vitest", "@testing-library/*", "playwright", "@playwright/test"],
    },
    "build": {
        "tools": ["vite", "webpack", "turbo", "nx", "@nx/*", "esbuild", "rollup"],
    },
    "storybook": {
        "core": ["@storybook/*"],
    },
}

PYTHON_FRAMEWORK_SIGNATURES: SignatureMap = {
    "django": {
        "core": ["django"],
        "rest": ["djangorestframework", "django-rest-framework"],
        "async": ["channels", "django-channels"],
        "cms": ["wagtail", "django-cms"],
    },
    "flask": {
        "core": ["flask"],
        "extensions": ["flask-sqlalchemy", "flask-restful", "flask-cors"],
    },
    "fastapi": {
        "core": ["fastapi"],
        "async": ["uvicorn", "starlette"],
        "validation": ["pydantic"],
    },
    "datascience": {
        "core": ["numpy", "pandas", "scipy"],
        "ml": ["scikit-learn", "tensorflow", "torch", "pytorch"],
        "viz": ["matplotlib", "seaborn", "plotly"],
    },
    "testing": {
        "frameworks": ["pytest", "unittest2", "nose2"],
        "helpers": ["pytest-*", "coverage"],
    },
    "web": {
        "servers": ["gunicorn", "uwsgi"],
        "async": ["aiohttp", "tornado"],
    },
}

RUST_FRAMEWORK_SIGNATURES: SignatureMap = {
    "actix": {
        "core": ["actix-web", "actix-rt"],
        "middleware": ["actix-cors", "actix-session"],
    },
    "rocket": {
        "core": ["rocket"],
        "features": ["rocket_contrib"],
    },
    "async": {
        "runtime": ["tokio", "async-std"],
        "helpers": ["futures"],
    },
    "serde": {
        "core": ["serde", "serde_json"],
        "formats": ["serde_yaml", "serde_derive"],
    },
    "testing": {
        "frameworks": ["criterion", "proptest"],
    },
}

RUBY_FRAMEWORK_SIGNATURES: SignatureMap = {
    "rails": {
        "core": ["rails"],
        "database": ["activerecord", "pg", "mysql2"],
        "testing": ["rspec-rails", "factory_bot_rails"],
        "frontend": ["webpacker", "importmap-rails"],
    },
    "sinatra": {
        "core": ["sinatra"],
        "extensions": ["sinatra-contrib"],
    },
    "testing": {
        "frameworks": ["rspec", "rspec-*", "minitest"],
        "helpers": ["capybara", "factory_bot", "factory_bot_*"],
    },
    "utilities": {
        "async": ["sidekiq", "delayed_job"],
        "http": ["faraday", "httparty"],
    },
}


@dataclass(frozen=True)
class SignatureTable:
    """Signatures for one ecosystem plus the frameworks eligible as primary."""

    ecosystem: Ecosystem
    signatures: SignatureMap
    primary_eligible: Tuple[str, ...]


SIGNATURE_TABLES: Dict[Ecosystem, SignatureTable] = {
    Ecosystem.NPM: SignatureTable(
        Ecosystem.NPM, NPM_FRAMEWORK_SIGNATURES, ("react", "vue", "angular", "svelte")
    ),
    Ecosystem.PIP: SignatureTable(
        Ecosystem.PIP, PYTHON_FRAMEWORK_SIGNATURES, ("django", "flask", "fastapi")
    ),
    Ecosystem.CARGO: SignatureTable(
        Ecosystem.CARGO, RUST_FRAMEWORK_SIGNATURES, ("actix", "rocket")
    ),
    Ecosystem.BUNDLER: SignatureTable(
        Ecosystem.BUNDLER, RUBY_FRAMEWORK_SIGNATURES, ("rails", "sinatra")
    ),
}
