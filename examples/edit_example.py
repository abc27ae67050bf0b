"""Load a .properties file, edit it, and show that untouched lines survive."""

import sys
sys.path.insert(0, str(__import__("pathlib").Path(__file__).parent.parent))

from fprops.reader import PropsReader

SOURCE = """\
# Server settings
#   edit with care

server.host = localhost
server.port : 8080

! paths use escaped colons
data.dir=C\\:/var/data
welcome=Hello, \\
        world
"""

doc = PropsReader.parse(SOURCE)

print("Decoded values:")
for key, value in doc.items():
    print(f"  {key!r:16} -> {value!r}")

doc["server.port"] = "9090"
doc["greeting.de"] = "Grüß Gott ☃"
doc.set_comment("greeting.de", ["German greeting", "added by edit_example.py"])
doc.set_comment("server.host", ["Server settings"])
doc.remove("welcome")

output = str(__import__("pathlib").Path(__file__).parent / "edited.properties")
nbytes = doc.write(output)
print(f"\nWrote {output} ({nbytes} bytes)")

print()
print("=" * 60)
print("EDITED .properties CONTENTS:")
print("=" * 60)
print()
print(doc.to_text())
