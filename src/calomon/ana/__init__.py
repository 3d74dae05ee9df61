"""Analysis scripts which monitor the calorimeter reconstruction.

- `AnaManager`: feeds events to a set of configured analysis scripts and
  finalizes them at the end of the run
- `metric`: reconstruction quality analysis scripts

**Example Usage:**
```python
from calomon.ana import AnaManager

ana = AnaManager({"ecal": {"name": "single_particle_reco", ...}})
for event in events:
    ana(event)
ana.finish()
```
"""

from .manager import AnaManager
