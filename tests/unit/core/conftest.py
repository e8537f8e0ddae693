"""Shared fixtures for core unit tests"""

import pytest
from markdown_it import MarkdownIt


SAMPLE_POST = """\
---
title: Tight-binding model of graphene
date: 2021-05-02
categories: physics
tags: [condensed-matter, tight-binding]
---

# Tight-binding model

The Hamiltonian is $H = -t \\sum_{\\langle i,j \\rangle} c_i^\\dagger c_j$.

$$
E(k) = \\pm t |f(k)|
$$

## Numerics

```python
import numpy as np
```

![band structure](bands.png)
"""


@pytest.fixture(name="parser")
def parser_fixture():
    return MarkdownIt("gfm-like", options_update={"linkify": False})


@pytest.fixture(name="sample_post")
def sample_post_fixture(tmp_path):
    """SAMPLE_POST written to tmp_path along with the image it references."""
    (tmp_path / "bands.png").write_bytes(b"\x89PNG")
    path = tmp_path / "2021-05-02-graphene.md"
    path.write_text(SAMPLE_POST, encoding="utf-8")
    return path
