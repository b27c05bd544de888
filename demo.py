from pmec import Model, PolicyOp, RoleManager
from pmec.invariants import check_all_invariants
from pmec.log import configure_logging

MODEL_TEXT = """
[request_definition]
r = sub, obj, act

[policy_definition]
p = sub, obj, act

[role_definition]
g = _, _

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = g(r.sub, p.sub) && r.obj == p.obj && r.act == p.act
"""


class PrintingRoleManager(RoleManager):
    def __init__(self):
        self.links = set()

    def clear(self):
        self.links.clear()

    def add_link(self, name1, name2, *domain):
        self.links.add((name1, name2) + domain)

    def delete_link(self, name1, name2, *domain):
        self.links.discard((name1, name2) + domain)

    def has_link(self, name1, name2, *domain):
        return (name1, name2) + domain in self.links

    def get_roles(self, name, *domain):
        return [link[1] for link in self.links if link[0] == name]

    def get_users(self, name, *domain):
        return [link[0] for link in self.links if link[1] == name]


configure_logging("info")

print("--- PMEC Live Demo ---")

# 1. Load model
model = Model.from_text(MODEL_TEXT)
print(f"[+] Model loaded, sections: {model.sections()}")
print(f"    - p uses hashed storage: {model['p']['p'].uses_hashed_storage}")

# 2. Add rules
model.add_policies("p", "p", [["admin", "data1", "read"], ["admin", "data1", "write"]])
model.add_policy("g", "g", ["alice", "admin"])
print(f"[+] Rules: {model.get_policy('p', 'p')}")

# 3. Validate and build role links
check_all_invariants(model)
rm = PrintingRoleManager()
model.build_role_links(rm)
print(f"[+] alice is admin: {rm.has_link('alice', 'admin')}")

# 4. Incremental change
model.add_policy("g", "g", ["bob", "admin"])
model.build_incremental_role_links(rm, PolicyOp.ADD, "g", "g", [["bob", "admin"]])
print(f"[+] admin users: {sorted(rm.get_users('admin'))}")

# 5. Filtered removal
removed_any, removed = model.remove_filtered_policy("p", "p", 2, "write")
print(f"[+] Removed {removed}")

model.print_policy()
print("--- Demo Complete ---")
