"""
权限树工具
backend/app/utils/permission_tree.py
纯函数，无IO：
1. build_tree：扁平权限列表 → 树（parent_code索引一次构建，O(n)下钻）
2. close_ancestors：授权编码补齐祖先链，保证子节点能挂到根
3. filter_user_menu_nodes：菜单授权过滤 + 祖先补齐，保持原排序
4. filter_button_codes：按钮权限过滤（非菜单类型）
入参节点需提前按 (sort, create_time) 排序，本模块不重新排序
"""
from typing import Dict, Iterable, List, Optional, Sequence, Set

from app.models.sys_permission import PERMISSION_TYPE_MENU
from app.schemas.sys_permission import PermissionTreeNode


def _parent_key(parent_code: Optional[str]) -> Optional[str]:
    # 空字符串与None都视为根
    return parent_code or None


def _to_tree_node(node) -> PermissionTreeNode:
    if isinstance(node, PermissionTreeNode):
        return node.model_copy(update={"children": None})
    return PermissionTreeNode.model_validate(node)


def build_tree(nodes: Sequence, parent_code: Optional[str] = None) -> List[PermissionTreeNode]:
    """
    构建权限树

    Args:
        nodes: 已排序的权限节点（ORM对象或同字段的对象）
        parent_code: None取根节点（parent_code为空），否则取该编码下的子树

    父节点不在nodes中的节点不会被挂载，也不会提升为根节点。
    同一路径上重复出现的编码会被跳过，父子环不会导致无限递归。
    """
    children_index: Dict[Optional[str], List] = {}
    for node in nodes:
        children_index.setdefault(_parent_key(node.parent_code), []).append(node)

    start = _parent_key(parent_code)
    path = {start} if start is not None else set()
    return _descend(children_index, start, path)


def _descend(children_index: Dict[Optional[str], List], key: Optional[str], path: Set[str]) -> List[PermissionTreeNode]:
    result = []
    for node in children_index.get(key, []):
        if node.code in path:
            continue
        tree_node = _to_tree_node(node)
        children = _descend(children_index, node.code, path | {node.code})
        if children:
            tree_node.children = children
        result.append(tree_node)
    return result


def close_ancestors(seed_codes: Iterable[str], all_nodes: Sequence) -> Set[str]:
    """
    祖先闭包：结果包含全部seed_codes，以及每个seed在all_nodes中的祖先链

    向上遍历遇到以下情况停止：无父节点、父节点不在all_nodes中、父节点已在结果中
    """
    by_code = {node.code: node for node in all_nodes}
    seeds = list(seed_codes)
    closed: Set[str] = set(seeds)

    for code in seeds:
        node = by_code.get(code)
        if node is None:
            continue
        parent = node.parent_code
        while parent and parent in by_code and parent not in closed:
            closed.add(parent)
            parent = by_code[parent].parent_code

    return closed


def filter_user_menu_nodes(menu_nodes: Sequence, permission_codes: Iterable[str]) -> List:
    """授权过滤 → 祖先补齐 → 按原顺序过滤"""
    granted = set(permission_codes)
    if not granted:
        return []

    seeds = [node.code for node in menu_nodes if node.code in granted]
    closure = close_ancestors(seeds, menu_nodes)
    return [node for node in menu_nodes if node.code in closure]


def filter_button_codes(nodes: Sequence, permission_codes: Iterable[str]) -> List[str]:
    """非菜单类型且已授权的权限编码，按节点顺序去重"""
    granted = set(permission_codes)
    result: List[str] = []
    seen: Set[str] = set()
    for node in nodes:
        if node.type == PERMISSION_TYPE_MENU:
            continue
        if node.code in granted and node.code not in seen:
            seen.add(node.code)
            result.append(node.code)
    return result
