"""
Type hints that are used throughout
"""

from __future__ import annotations

from typing import Callable, Union

import numpy as np
import pandas as pd
from typing_extensions import TypeAlias

NUMERIC_DATA: TypeAlias = Union[float, int, np.floating, np.integer]
"""
Type alias for a value that can be accumulated or used as a reference
"""

RecordsDataFrame: TypeAlias = pd.DataFrame
"""
Type alias for the [pandas.DataFrame][pd.DataFrame] shape we use throughout

For typing purposes, this is just a direct alias of [pandas.DataFrame][pd.DataFrame].
However, the point of defining this
is to provide greater clarity of the kind of data we expect.

We expect a collection of records in long format.
Each row is one report for one location on one day.
The metadata (location, continent, date, population)
and the reported values (new cases, new deaths, new vaccinations)
are all ordinary columns.
Missing reports are represented by nulls (NaN).

An example of this kind of data is given below.

```python
  location continent       date  population  new_cases  new_deaths  new_vaccinations
0  Albania    Europe 2021-01-10   2877800.0       10.0         1.0               NaN
1  Albania    Europe 2021-01-11   2877800.0       12.0         0.0              50.0
2    World       NaN 2021-01-10  7900000000.0   600000.0     12000.0               NaN
```
"""

RowFilter: TypeAlias = Callable[[pd.DataFrame], "pd.Series[bool]"]
"""
Type alias for a row filter predicate

A row filter takes a [RecordsDataFrame][(m).] and returns
a boolean [pd.Series][pandas.Series], aligned with its index,
which is `True` for the rows to keep.
"""
