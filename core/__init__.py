"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- 狀態機：集中管理房間狀態轉換與 ticket 進度
- Voting Engine：目前這張票的投票回合
- Identity Resolver：以名字辨識重新連線的 participant
- Manager：Room 的 load -> 修改 -> 寫回，以及報告封存
- Store：key-value store 抽象層
"""
