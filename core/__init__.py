"""
核心業務邏輯層

這個 package 包含授權與資源擁有權的所有規則：
- Identity：解析呼叫者的角色與隊伍
- Authorizer：單一的授權判斷函式
- ProjectManager：每隊每活動一個專案、獎項報名
- StateMachine：使用者錄取狀態轉換
- CheckIn：報到資格判斷與報到紀錄
- Locks：並發控制工具
"""
